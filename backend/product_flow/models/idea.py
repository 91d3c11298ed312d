import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.types import TypeDecorator, CHAR


from ..database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GUID(TypeDecorator):
    """Platform-independent UUID type.

    Uses CHAR(36) to store UUIDs as strings, compatible with all backends
    including SQLite.
    """

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return uuid.UUID(value)
        return value


class Idea(Base):
    __tablename__ = "ideas"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)

    # Unique only within (portfolio_code, product_code); assigned as max + 1
    idea_number = Column(Integer, nullable=False)
    name = Column(String, nullable=False, index=True)
    hypothesis = Column(Text, nullable=False)

    # backlog | firstLevel | secondLevel | scaling | failed
    validation_status = Column(String(32), nullable=True, index=True)
    # List of serialized {"status", "timestamp", "notes"?} entries, append-only
    status_history = Column(JSON, nullable=True, default=list)
    upvotes = Column(Integer, nullable=True, default=0)
    source = Column(String(32), nullable=True, index=True)

    portfolio_code = Column(String, nullable=False, index=True)
    product_code = Column(String, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
