"""Personal-record deduplication over the append-only strength-test history."""

from typing import Iterable, Sequence

from trainlog.schemas.records import StrengthTestRecord, normalize_test_type
from trainlog.schemas.report import LatestPR


class PRDeduplicator:
    """Collapse strength-test history to one latest entry per test type."""

    def latest_per_type(self, all_records: Iterable[StrengthTestRecord]) -> Sequence[LatestPR]:
        """
        Select the most recent record of every test type.

        The whole unfiltered history must be passed in: windowing first would
        make an older result look like the latest one. The input is never
        modified.

        Args:
            all_records: Complete strength-test history in any order

        Returns:
            One LatestPR per distinct test type, newest first
        """
        latest: dict[str, StrengthTestRecord] = {}
        counts: dict[str, int] = {}

        for record in all_records:
            key = record.test_type
            counts[key] = counts.get(key, 0) + 1
            current = latest.get(key)
            if current is None or record.created_at > current.created_at:
                latest[key] = record

        ordered = sorted(latest.values(), key=lambda r: r.created_at, reverse=True)
        return tuple(
            LatestPR(record=record, history_count=counts[record.test_type])
            for record in ordered
        )

    def history_count_for_type(
        self, all_records: Iterable[StrengthTestRecord], test_type: str
    ) -> int:
        """Number of recorded results for a test type."""
        key = normalize_test_type(test_type)
        return sum(1 for record in all_records if record.test_type == key)

    def history_for_type(
        self, all_records: Iterable[StrengthTestRecord], test_type: str
    ) -> Sequence[StrengthTestRecord]:
        """All results of a test type, oldest first."""
        key = normalize_test_type(test_type)
        matching = [record for record in all_records if record.test_type == key]
        return tuple(sorted(matching, key=lambda r: r.created_at))


# Singleton instance
pr_deduplicator = PRDeduplicator()
