"""Custom SQLAlchemy column types shared by the billing models."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.dialects import postgresql
from sqlalchemy.types import CHAR, TypeDecorator


class GUID(TypeDecorator):
    """UUID column that works on PostgreSQL and SQLite alike.

    PostgreSQL stores a native ``UUID``; every other dialect keeps a
    36-character string. Values always come back as ``str`` so readings and
    bills can be addressed by plain text identifiers in the API. Column
    defaults must produce ``str`` as well, otherwise multi-row inserts cannot
    match the generated keys against the returned rows.
    """

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):  # type: ignore[override]
        if dialect.name == "postgresql":
            return dialect.type_descriptor(postgresql.UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return value
        if dialect.name == "postgresql":
            return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
        return str(value)

    def process_result_value(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return value
        return str(value)
