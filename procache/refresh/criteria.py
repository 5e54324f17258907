"""Decide whether a cached work order needs a refresh."""

from procache.config import UpdateCriteria
from procache.models.work_order import WorkOrderRecord, WorkOrderStatus


def matches(record: WorkOrderRecord, criteria: UpdateCriteria) -> bool:
    """Return True when ``record`` should be re-fetched under ``criteria``.

    An UNKNOWN record is always selected when UNKNOWN is a target status,
    whatever the machine prefixes say.
    """
    if record.status == WorkOrderStatus.UNKNOWN and WorkOrderStatus.UNKNOWN in criteria.statuses:
        return True
    if record.status not in criteria.statuses:
        return False
    return any(record.has_resource_prefix(machine) for machine in criteria.machines)
