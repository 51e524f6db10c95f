"""Source adapters mapping collaborator documents to personnel records."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .personnel_store import PersonnelStoreAdapter


@runtime_checkable
class RecordAdapter(Protocol):
    """Source-specific record adapter contract.

    Implementations transform source-native documents into dictionaries that
    validate as :class:`~hrpromotion.schemas.PersonnelRecord`.
    """

    source: str

    def can_handle(self, blob: bytes | str | dict[str, Any], metadata: dict) -> bool:
        """Return True when the adapter can parse the given payload."""

    def parse_record(self, blob: bytes | str | dict[str, Any]) -> dict:
        """Parse a source document and return a personnel record payload."""


__all__ = ["RecordAdapter", "PersonnelStoreAdapter"]
