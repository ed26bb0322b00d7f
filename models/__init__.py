from .schemas import PhotoSynthErrorResponse, PhotoSynthUrlResponse
from .transform import FORMATS, ErrorKind, TransformRequest, TransformResult

__all__ = [
    "FORMATS",
    "ErrorKind",
    "PhotoSynthErrorResponse",
    "PhotoSynthUrlResponse",
    "TransformRequest",
    "TransformResult",
]
