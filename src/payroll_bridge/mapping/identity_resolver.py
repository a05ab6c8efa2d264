"""Employee identity resolution against an external payroll system."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from payroll_bridge.core.protocols import IMappingStore
from payroll_bridge.models.payroll import MappingPartition

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Maps internal employee ids to the id a payroll system knows them by.

    An employee without an active mapping is simply not exportable to that
    system; none of these methods raise for it.
    """

    def __init__(self, store: IMappingStore) -> None:
        self._store = store

    def resolve_many(self, employee_ids: Sequence[str], system_type: str) -> dict[str, str]:
        """Batch lookup. Unmapped employees are absent from the result."""
        distinct = list(dict.fromkeys(employee_ids))
        if not distinct:
            return {}
        found = self._store.get_external_ids(distinct, str(system_type))
        return {emp_id: ext_id for emp_id, ext_id in found.items() if ext_id}

    def resolve_one(self, employee_id: str, system_type: str) -> str | None:
        return self._store.get_external_id(employee_id, str(system_type)) or None

    def partition_by_mapping_presence(
        self, employee_ids: Sequence[str], system_type: str
    ) -> MappingPartition:
        """Split ``employee_ids`` into mapped and unmapped, keeping input order."""
        mapped = self.resolve_many(employee_ids, system_type)
        partition = MappingPartition(
            valid=[e for e in employee_ids if e in mapped],
            missing=[e for e in employee_ids if e not in mapped],
        )
        if partition.missing:
            logger.debug(
                "%d of %d employees have no %s mapping",
                len(partition.missing), len(employee_ids), system_type,
            )
        return partition
