"""Persist and reload JSON transcripts of dispatched tasks."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from common import Settings

from .agents.base import DispatchRecord


TRANSCRIPT_VERSION = 1


def write_transcript(
    records: Sequence[DispatchRecord],
    settings: Settings,
    *,
    output_path: str | Path | None = None,
    metadata: dict[str, str] | None = None,
) -> Path:
    """Write ``records`` as a transcript and return the file path.

    Without ``output_path`` the file lands in ``settings.transcripts_dir`` and
    is named after the agent when every record went to the same one.
    """
    destination = Path(output_path) if output_path else _default_destination(records, settings)
    destination.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "version": TRANSCRIPT_VERSION,
        "written_at": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "default_model": settings.default_model,
        "metadata": metadata or {},
        "dispatches": [_record_to_entry(record) for record in records],
    }

    destination.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    return destination


def read_transcript(path: str | Path) -> list[DispatchRecord]:
    """Load the dispatch records stored in a transcript file."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    version = payload.get("version")
    if version != TRANSCRIPT_VERSION:
        raise ValueError(f"Unsupported transcript version {version!r} in {path}")
    return [DispatchRecord(**entry) for entry in payload.get("dispatches", [])]


def _record_to_entry(record: DispatchRecord) -> dict[str, Any]:
    entry = asdict(record)
    entry["context"] = dict(record.context)
    return entry


def _default_destination(records: Sequence[DispatchRecord], settings: Settings) -> Path:
    agents = {record.agent_name for record in records}
    stem = agents.pop() if len(agents) == 1 else "dispatch"
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    return Path(settings.transcripts_dir) / f"{stem}_{stamp}.json"
