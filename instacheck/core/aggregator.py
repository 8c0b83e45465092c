"""Summary counts over the record store."""

from collections.abc import Iterable

from instacheck.models.record import CheckStatus, PageStatus, UsernameRecord
from instacheck.models.stats import ProcessingStats


def compute_stats(records: Iterable[UsernameRecord]) -> ProcessingStats:
    """
    Derive processing statistics from the current records.

    Args:
        records: Records in any order

    Returns:
        ProcessingStats with total, processed, open, closed and error counts
    """
    stats = ProcessingStats()
    for record in records:
        stats.total += 1
        if record.is_terminal:
            stats.processed += 1
        if record.check_status == CheckStatus.FAILED:
            stats.errors += 1
        if record.page_status == PageStatus.OPEN:
            stats.open += 1
        elif record.page_status == PageStatus.CLOSED:
            stats.closed += 1
    return stats
