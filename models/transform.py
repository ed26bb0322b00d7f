"""
Request and result types of the PhotoSynth URL builder.

Transformation fields are not coerced: the builder validates each one and
drops whatever does not fit instead of raising.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

FORMATS = ("avif", "gif", "jpeg", "png", "tiff", "webp")


class ErrorKind(str, Enum):
    MISSING_KEY = "missing_key"
    INVALID_ENDPOINT = "invalid_endpoint"
    INVALID_SOURCE_URL = "invalid_source_url"


@dataclass
class TransformRequest:
    source_url: str
    key: Optional[str] = None

    # Size; measured_width comes from the hosting layout and is only used
    # when neither width nor height is requested.
    width: Any = None
    height: Any = None
    measured_width: Any = None

    adaptive_histogram: Any = None
    blur: Any = None
    brightness: Any = None
    crop_left_percent: Any = None
    crop_top_percent: Any = None
    crop_right_percent: Any = None
    crop_bottom_percent: Any = None
    gamma: Any = None
    hue: Any = None
    lightness: Any = None
    normalize_lower: Any = None
    normalize_upper: Any = None
    rotate: Any = None
    saturation: Any = None
    sharpen: Any = None
    greyscale: Any = None
    format: Any = None

    cache_bust: Union[bool, str, None] = None
    bypass: bool = False


@dataclass
class TransformResult:
    url: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, url: str) -> "TransformResult":
        return cls(url=url)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "TransformResult":
        return cls(error=message, error_kind=kind)
