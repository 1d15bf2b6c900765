"""Read-only repair order queries."""

from sqlalchemy import select

from workshop_kernel.models.repair_order import RepairOrder
from workshop_kernel.selectors.base import BaseSelector


class RepairOrderSelector(BaseSelector):
    """Read-only access to repair orders."""

    def statuses(self) -> list[str]:
        """Status of every repair order, as stored."""
        return list(self.session.scalars(select(RepairOrder.status)).all())
