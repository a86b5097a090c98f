"""Training log progress analytics and reporting."""
