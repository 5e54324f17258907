"""Relational snapshots of the work order cache in SQLite."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from procache.database.connection import Database
from procache.exceptions import SnapshotError
from procache.models.snapshot import CacheSnapshot, SaveAcknowledgement
from procache.models.work_order import OperationRow, TrackingRow, WorkOrderRecord
from procache.persistence.base import history_row

if TYPE_CHECKING:
    from procache.refresh.service import RefreshResult

logger = logging.getLogger(__name__)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class SqliteSnapshotAdapter:
    """Persist the whole cache into normalized tables.

    A save replaces every stored work order inside one transaction.
    """

    def __init__(self, db: Database):
        self.db = db

    async def load(self) -> Optional[CacheSnapshot]:
        meta = await self.db.execute_read(
            "SELECT timestamp_data, timestamp_save FROM cache_meta WHERE id = 1"
        )
        if not meta:
            return None

        try:
            routing = await self._load_routing_rows()
            tracking = await self._load_tracking_rows()
            rows = await self.db.execute_read(
                """
                SELECT id, wo_index, status, order_quantity, scheduled_start_date
                FROM workorders
                ORDER BY position
                """
            )
            workorders = [
                WorkOrderRecord(
                    index=row[1],
                    status=row[2],
                    order_quantity=row[3],
                    scheduled_start_date=_dt(row[4]),
                    routing_rows=routing.get(row[0], []),
                    tracking_rows=tracking.get(row[0], []),
                )
                for row in rows
            ]
            return CacheSnapshot(
                timestamp_data=_dt(meta[0][0]),
                timestamp_save=_dt(meta[0][1]),
                workorders=workorders,
            )
        except (ValidationError, ValueError, InvalidOperation) as exc:
            raise SnapshotError(f"Malformed snapshot in {self.db.db_path}: {exc}") from exc

    async def _load_routing_rows(self) -> dict[int, list[OperationRow]]:
        rows = await self.db.execute_read(
            """
            SELECT workorder_id, op, description, resource, complete,
                   complete_total, complete_date
            FROM routing_rows
            ORDER BY workorder_id, position
            """
        )
        grouped: dict[int, list[OperationRow]] = defaultdict(list)
        for row in rows:
            grouped[row[0]].append(
                OperationRow(
                    op=row[1],
                    description=row[2],
                    resource=row[3],
                    complete=bool(row[4]),
                    complete_total=Decimal(row[5]),
                    complete_date=_dt(row[6]),
                )
            )
        return grouped

    async def _load_tracking_rows(self) -> dict[int, list[TrackingRow]]:
        rows = await self.db.execute_read(
            """
            SELECT workorder_id, date_started, date_ended, op, resource,
                   quantity_start, quantity_end, run_total
            FROM tracking_rows
            ORDER BY workorder_id, position
            """
        )
        grouped: dict[int, list[TrackingRow]] = defaultdict(list)
        for row in rows:
            grouped[row[0]].append(
                TrackingRow(
                    date_started=_dt(row[1]),
                    date_ended=_dt(row[2]),
                    op=row[3],
                    resource=row[4],
                    quantity_start=Decimal(row[5]),
                    quantity_end=Decimal(row[6]),
                    run_total=Decimal(row[7]),
                )
            )
        return grouped

    async def save(self, snapshot: CacheSnapshot) -> SaveAcknowledgement:
        async with self.db.transaction():
            await self.db.execute_write_no_commit("DELETE FROM tracking_rows")
            await self.db.execute_write_no_commit("DELETE FROM routing_rows")
            await self.db.execute_write_no_commit("DELETE FROM workorders")
            await self.db.execute_write_no_commit(
                """
                INSERT INTO cache_meta (id, timestamp_data, timestamp_save)
                VALUES (1, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    timestamp_data=excluded.timestamp_data,
                    timestamp_save=excluded.timestamp_save
                """,
                [_iso(snapshot.timestamp_data), _iso(snapshot.timestamp_save)],
            )

            for position, wo in enumerate(snapshot.workorders):
                workorder_id = await self.db.execute_write_no_commit(
                    """
                    INSERT INTO workorders (
                        position, wo_index, status, order_quantity, scheduled_start_date
                    )
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [
                        position, wo.index, wo.status.value, wo.order_quantity,
                        _iso(wo.scheduled_start_date),
                    ],
                )
                await self.db.executemany_no_commit(
                    """
                    INSERT INTO routing_rows (
                        workorder_id, position, op, description, resource,
                        complete, complete_total, complete_date
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            workorder_id, i, r.op, r.description, r.resource,
                            int(r.complete), str(r.complete_total), _iso(r.complete_date),
                        )
                        for i, r in enumerate(wo.routing_rows)
                    ],
                )
                await self.db.executemany_no_commit(
                    """
                    INSERT INTO tracking_rows (
                        workorder_id, position, date_started, date_ended, op,
                        resource, quantity_start, quantity_end, run_total
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            workorder_id, i, _iso(t.date_started), _iso(t.date_ended),
                            t.op, t.resource, str(t.quantity_start),
                            str(t.quantity_end), str(t.run_total),
                        )
                        for i, t in enumerate(wo.tracking_rows)
                    ],
                )

        logger.info("Saved %d work orders to %s", len(snapshot.workorders), self.db.db_path)
        return SaveAcknowledgement(
            location=str(self.db.db_path),
            records_saved=len(snapshot.workorders),
            saved_at=snapshot.timestamp_save,
        )

    async def record_update(self, result: "RefreshResult") -> None:
        row = history_row(result)
        await self.db.execute_write(
            """
            INSERT INTO update_history (
                started_at, finished_at, status, queued, processed, failed, error_message
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                row["started_at"], row["finished_at"], row["status"], row["queued"],
                row["processed"], row["failed"], row["error_message"],
            ],
        )

    async def load_history(self, limit: int = 10) -> list[dict]:
        rows = await self.db.execute_read(
            """
            SELECT started_at, finished_at, status, queued, processed, failed, error_message
            FROM update_history
            ORDER BY id DESC
            LIMIT ?
            """,
            [limit],
        )
        return [
            {
                "started_at": row[0],
                "finished_at": row[1],
                "status": row[2],
                "queued": row[3],
                "processed": row[4],
                "failed": row[5],
                "error_message": row[6],
            }
            for row in rows
        ]
