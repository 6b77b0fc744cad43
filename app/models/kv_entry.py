"""
Key-value slot model (backing table of the synchronous key-value store)
"""
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from app.constants import KV_STORE_TABLE
from app.db.base import Base


class KeyValueEntry(Base):
    __tablename__ = KV_STORE_TABLE

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)  # Whole value, written and read in one statement
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)
