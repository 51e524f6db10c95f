"""Batch pipeline: load a roster file, run the engine, write results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List

import pendulum
import structlog

from . import __version__
from .adapters import PersonnelStoreAdapter, RecordAdapter
from .core import AuditRecord, PromotionEngine, RankedRoster


class AdapterRegistry:
    """Registry mapping roster sources to record adapters."""

    def __init__(self, adapters: Iterable[RecordAdapter]):
        self._adapters = {adapter.source: adapter for adapter in adapters}

    def get(self, source: str) -> RecordAdapter:
        try:
            return self._adapters[source]
        except KeyError as exc:
            raise KeyError(f"Unsupported source: {source!r}") from exc

    def sources(self) -> List[str]:
        return list(self._adapters.keys())


class RosterLoadError(ValueError):
    """Raised when roster loading encounters unreadable entries."""

    def __init__(self, errors: list[str], partial: list[dict[str, Any]]):
        super().__init__("Roster loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Roster loading failed: {self.errors}"


class RosterLoader:
    """Load roster entries from JSON arrays or JSON lines.

    Entries may be bare personnel record objects or envelopes of the form
    ``{"source": ..., "payload": ...}`` dispatched to a source adapter.
    Field-level validation is left to the engine so that invalid records are
    reported as rejected rather than dropped here.
    """

    def __init__(self, registry: AdapterRegistry):
        self._registry = registry

    def load(self, path: Path) -> list[dict[str, Any]]:
        entries: list[dict[str, Any]] = []
        errors: list[str] = []
        for label, item in self._iter_items(path, errors):
            if not isinstance(item, dict):
                errors.append(f"{label}: expected an object")
                continue
            source = item.get("source")
            if source is None:
                entries.append(item)
                continue
            try:
                adapter = self._registry.get(source)
            except KeyError:
                errors.append(f"{label}: unsupported source '{source}'")
                continue
            try:
                entries.append(adapter.parse_record(item.get("payload", item)))
            except Exception as exc:  # noqa: BLE001
                errors.append(f"{label}: {exc}")
        if errors:
            raise RosterLoadError(errors, entries)
        return entries

    @staticmethod
    def _iter_items(path: Path, errors: list[str]) -> Iterable[tuple[str, Any]]:
        text = path.read_text(encoding="utf-8")
        if text.lstrip().startswith("["):
            try:
                items = json.loads(text)
            except json.JSONDecodeError as exc:
                raise RosterLoadError([f"invalid JSON ({exc})"], []) from exc
            for idx, item in enumerate(items, start=1):
                yield f"item {idx}", item
            return
        for idx, line in enumerate(text.splitlines(), start=1):
            raw = line.strip()
            if not raw:
                continue
            try:
                yield f"line {idx}", json.loads(raw)
            except json.JSONDecodeError as exc:
                errors.append(f"line {idx}: invalid JSON ({exc})")


class OutputWriter:
    """Persist scoring outcomes."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default),
            encoding="utf-8",
        )

    def write_text(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False, default=_json_default))
            handle.write("\n")


class PromotionPipeline:
    """File-in, file-out wrapper around :class:`PromotionEngine`."""

    def __init__(
        self,
        *,
        engine: PromotionEngine,
        registry: AdapterRegistry,
        roster_loader: RosterLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._engine = engine
        self._registry = registry
        self._roster = roster_loader or RosterLoader(registry)
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        roster_path: Path,
        output_path: Path,
        as_of: str | None = None,
        audit_logger: AuditLogger | None = None,
        audit_report_path: Path | None = None,
        max_workers: int | None = None,
    ) -> RankedRoster:
        load_errors: list[str] = []
        try:
            entries = self._roster.load(roster_path)
        except RosterLoadError as exc:
            entries = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("roster.partial_load", errors=exc.errors)

        ranked = self._engine.run(entries, as_of=as_of, max_workers=max_workers)
        audits = self._engine.explain_roster(ranked)

        if audit_logger:
            for audit in audits:
                audit_logger.append(_audit_entry(audit, ranked))
        if audit_report_path:
            self._writer.write_text(audit_report_path, "\n".join(audit.to_text() for audit in audits))

        payload = ranked.to_dict()
        payload["metadata"].update(
            {
                "roster_path": str(roster_path),
                "load_errors": load_errors,
                "timestamp": pendulum.now().to_iso8601_string(),
                "app_version": __version__,
                "policy": self._engine.policy.describe(),
            }
        )
        self._writer.write(output_path, payload)

        self._logger.info(
            "pipeline.completed",
            roster_path=str(roster_path),
            scored=ranked.total,
            compliant=ranked.compliant_count,
            rejected=len(ranked.rejected),
            load_errors=len(load_errors),
        )
        return ranked


def default_registry() -> AdapterRegistry:
    """Return the default adapter registry."""
    return AdapterRegistry(adapters=[PersonnelStoreAdapter()])


def _audit_entry(audit: AuditRecord, ranked: RankedRoster) -> dict[str, Any]:
    entry = audit.to_dict()
    entry["as_of"] = ranked.metadata.as_of.isoformat()
    entry["namespace"] = ranked.metadata.namespace
    entry["algorithm_version"] = ranked.metadata.algorithm_version
    return entry


def _json_default(value):  # type: ignore[override]
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
