"""Uniqueness check over cached work orders."""

from __future__ import annotations

import logging
from typing import Iterable

from procache.models.work_order import WorkOrderRecord

logger = logging.getLogger(__name__)


def verify_integrity(records: Iterable[WorkOrderRecord]) -> bool:
    """Return False as soon as two records share an index value."""
    seen: set[str] = set()
    for record in records:
        if record.index in seen:
            logger.warning("Duplicate work order index: %s", record.index)
            return False
        seen.add(record.index)
    return True
