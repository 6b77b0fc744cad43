"""
Cached worker photo model (one row per worker)
"""
from sqlalchemy import Column, String, Text, BigInteger
from app.constants import WORKER_PHOTOS_TABLE
from app.db.base import Base


class CachedWorkerPhoto(Base):
    __tablename__ = WORKER_PHOTOS_TABLE

    worker_id = Column(String, primary_key=True)
    photo_url = Column(Text, nullable=False)  # data-URL or remote URL
    aadhaar_photo_url = Column(Text, nullable=True)
    timestamp = Column(BigInteger, nullable=False, index=True)  # Cache-write time, epoch ms
