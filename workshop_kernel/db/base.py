"""
Declarative base for the workshop's ORM models.

Every table gets a uuid4 primary key stored as text, so the same schema
runs on SQLite (tests, the single-machine install) and PostgreSQL.
Python ``Decimal`` annotations become ``Numeric(10, 2)`` and ``datetime``
annotations become ``UTCDateTime`` (UTC in storage, aware on read);
models only spell out a column type when it differs from that
(quantities and tax percentages use the aliases in ``db/types.py``).

Constraints a model does not name itself (primary and foreign keys,
mostly) are named by convention: ``fk_vehicles_customer_id_customers``.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import MetaData, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from workshop_kernel.db.types import UTCDateTime

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class UUIDString(TypeDecorator):
    """UUID held in a String(36) column; accepts UUID objects or their text."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value if isinstance(value, PyUUID) else PyUUID(str(value)))

    def process_result_value(self, value, dialect):
        return None if value is None else PyUUID(value)


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(10, 2, asdecimal=True),
        datetime: UTCDateTime(),
        PyUUID: UUIDString(),
    }

    id: Mapped[PyUUID] = mapped_column(primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Base for top-level records (customers, vehicles, documents, articles).

    ``created_at`` is stamped by the database on insert; ``updated_at`` is
    stamped on insert and again on every update.  Line tables hang off a
    tracked parent and use plain ``Base``.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())


UUID = PyUUID
