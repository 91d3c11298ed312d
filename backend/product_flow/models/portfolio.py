from sqlalchemy import JSON, Column, DateTime, String

from ..database import Base
from .idea import utc_now


class Portfolio(Base):
    __tablename__ = "portfolios"

    # URL-safe, immutable, globally unique
    code = Column(String(64), primary_key=True)
    organization_name = Column(String, nullable=False)
    name = Column(String, nullable=False)
    owners = Column(JSON, nullable=True, default=list)  # ordered list of emails
    # Ordered list of {"code", "name"}; legacy rows hold a JSON string
    products = Column(JSON, nullable=True, default=list)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
