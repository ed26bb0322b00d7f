from typing import Optional
from pydantic import BaseModel, Field


class PhotoSynthUrlResponse(BaseModel):
    url: str = Field(..., description="PhotoSynth transformation URL (or the source URL when bypassed)")


class PhotoSynthErrorResponse(BaseModel):
    detail: str
    code: Optional[str] = None
