import uuid

from sqlalchemy import Column, DateTime, String

from ..database import Base
from .idea import GUID, utc_now


class Studio(Base):
    __tablename__ = "studios"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    portfolio_id = Column(String(64), nullable=False)  # Portfolio.code

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)


class StudioUser(Base):
    __tablename__ = "studio_users"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    studio_id = Column(String(36), nullable=False)
    email = Column(String, nullable=False, index=True)  # stored lower-cased
    role = Column(String(32), nullable=True)  # engineer | product_manager | designer | project_manager | researcher
    specialization = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
