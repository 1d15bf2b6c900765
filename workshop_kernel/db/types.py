"""
Module: workshop_kernel.db.types
Responsibility: Column types shared by the workshop models.
Architecture position: Kernel > DB.  Imported by db/base.py and models/.

Column precision matches the workshop's fixed-precision schema:
    amounts      Numeric(10, 2)
    percentages  Numeric(5, 2)   (e.g. 7.00 for IGIC 7%)
    quantities   Numeric(10, 2)  (hours of labor or units of a part)
    timestamps   UTCDateTime     (UTC in storage, aware on read)

Values are rounded before they reach these columns (LedgerTotals.rounded()
for totals); a column never rounds a full-precision amount on its own.
"""

from datetime import UTC

from sqlalchemy import DateTime, Numeric
from sqlalchemy.types import TypeDecorator

MoneyAmount = Numeric(10, 2, asdecimal=True)

Percentage = Numeric(5, 2, asdecimal=True)

QuantityAmount = Numeric(10, 2, asdecimal=True)


class UTCDateTime(TypeDecorator):
    """
    Timestamp stored in UTC and always read back timezone-aware.

    Aware values are converted to UTC on the way in; naive values are taken
    to be UTC already.  SQLite keeps no offset, so there the UTC wall time
    is stored and the zone is re-attached on read.  Range bounds built in
    a local zone therefore compare correctly on every backend.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)
        return value.replace(tzinfo=None) if dialect.name == "sqlite" else value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)
