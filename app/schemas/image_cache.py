"""
Worker image cache schemas
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CachedImage(BaseModel):
    """One worker's locally cached photo set"""
    worker_id: str = Field(..., min_length=1)
    photo_url: str = Field(..., description="Image payload (data-URL) or remote reference")
    aadhaar_photo_url: Optional[str] = None
    timestamp: int = Field(..., description="Cache-write time, epoch milliseconds")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CachedImageIn(BaseModel):
    """Photo set handed to the cache over HTTP; the write time defaults to now"""
    worker_id: str = Field(..., min_length=1)
    photo_url: str
    aadhaar_photo_url: Optional[str] = None
    timestamp: Optional[int] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CacheImagesRequest(BaseModel):
    images: List[CachedImageIn]


class CachedImagesLookupRequest(BaseModel):
    worker_ids: List[str] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CachedImagesLookupResponse(BaseModel):
    images: Dict[str, CachedImage]
