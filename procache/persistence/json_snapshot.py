"""Flat-file JSON snapshots of the work order cache."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from procache.exceptions import SnapshotError
from procache.models.snapshot import CacheSnapshot, SaveAcknowledgement
from procache.persistence.base import history_row, snapshot_filename

if TYPE_CHECKING:
    from procache.refresh.service import RefreshResult

logger = logging.getLogger(__name__)

HISTORY_FILE = "update_history.jsonl"


class JsonSnapshotAdapter:
    """Store snapshots as a single JSON document on disk."""

    def __init__(self, snapshot_path: Path, archive_dir: Optional[Path] = None):
        self.snapshot_path = Path(snapshot_path)
        self.archive_dir = Path(archive_dir) if archive_dir else None
        self.history_path = self.snapshot_path.parent / HISTORY_FILE

    async def load(self) -> Optional[CacheSnapshot]:
        if not self.snapshot_path.exists():
            return None
        text = await asyncio.to_thread(self.snapshot_path.read_text, encoding="utf-8")
        try:
            return CacheSnapshot.model_validate_json(text)
        except ValidationError as exc:
            raise SnapshotError(f"Malformed snapshot {self.snapshot_path}: {exc}") from exc

    async def save(self, snapshot: CacheSnapshot) -> SaveAcknowledgement:
        text = snapshot.model_dump_json(indent=2)
        await asyncio.to_thread(self._write_atomic, self.snapshot_path, text)

        if self.archive_dir is not None:
            archive_path = self.archive_dir / snapshot_filename(snapshot.timestamp_save)
            await asyncio.to_thread(self._write_atomic, archive_path, text)
            logger.info("Archived snapshot to %s", archive_path)

        logger.info(
            "Saved %d work orders to %s", len(snapshot.workorders), self.snapshot_path
        )
        return SaveAcknowledgement(
            location=str(self.snapshot_path),
            records_saved=len(snapshot.workorders),
            saved_at=snapshot.timestamp_save,
        )

    async def record_update(self, result: "RefreshResult") -> None:
        line = json.dumps(history_row(result), ensure_ascii=False)
        await asyncio.to_thread(self._append_line, self.history_path, line)

    async def load_history(self, limit: int = 10) -> list[dict]:
        if not self.history_path.exists():
            return []
        text = await asyncio.to_thread(self.history_path.read_text, encoding="utf-8")
        rows = [json.loads(line) for line in text.splitlines() if line.strip()]
        return list(reversed(rows))[:limit]

    @staticmethod
    def _write_atomic(path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(path)

    @staticmethod
    def _append_line(path: Path, line: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
