import uuid

from sqlalchemy import Column, DateTime, String, Text

from ..database import Base
from .idea import GUID, utc_now


class KBDocument(Base):
    __tablename__ = "kb_documents"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)  # markdown
    portfolio_code = Column(String, nullable=True, index=True)
    product_code = Column(String, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
