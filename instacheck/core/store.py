"""In-memory record store - single owner of all username records."""

from collections.abc import Iterable

from instacheck.core.normalizer import normalize_many
from instacheck.models.record import UsernameRecord

_IMMUTABLE_FIELDS = frozenset({"id", "username"})


class RecordStore:
    """
    Ordered collection of username records for one session.

    Records are replaced, never mutated in place, so callers holding a
    record from ``list()`` see a stable snapshot.
    """

    def __init__(self) -> None:
        self._records: dict[str, UsernameRecord] = {}

    def add(self, usernames: Iterable[str]) -> list[UsernameRecord]:
        """
        Append one new IDLE record per non-empty normalized username.

        Args:
            usernames: Raw candidates (handles, @mentions, profile URLs)

        Returns:
            The newly created records in input order
        """
        added = []
        for username in normalize_many(list(usernames)):
            record = UsernameRecord(username=username)
            while record.id in self._records:
                record = UsernameRecord(username=username)
            self._records[record.id] = record
            added.append(record)
        return added

    def update(self, record_id: str, **fields) -> UsernameRecord | None:
        """
        Merge fields into the record with the given id.

        ``id`` and ``username`` are never overwritten. Unknown ids are a no-op.

        Returns:
            The updated record, or None if the id is absent
        """
        current = self._records.get(record_id)
        if current is None:
            return None
        changes = {k: v for k, v in fields.items() if k not in _IMMUTABLE_FIELDS}
        updated = current.model_copy(update=changes)
        self._records[record_id] = updated
        return updated

    def get(self, record_id: str) -> UsernameRecord | None:
        return self._records.get(record_id)

    def clear(self) -> None:
        self._records.clear()

    def list(self) -> list[UsernameRecord]:
        """Current records in insertion order."""
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)
