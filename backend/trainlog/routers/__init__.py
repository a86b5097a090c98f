"""API routers package."""

from trainlog.routers import progress, reports

__all__ = ["progress", "reports"]
