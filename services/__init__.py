from .url_builder import (
    InvalidEndpointError,
    InvalidSourceUrlError,
    MissingKeyError,
    PhotoSynthError,
    UrlBuilder,
    generate_url,
    is_valid_http_url,
    round_multiple,
    validate_value,
)

__all__ = [
    "InvalidEndpointError",
    "InvalidSourceUrlError",
    "MissingKeyError",
    "PhotoSynthError",
    "UrlBuilder",
    "generate_url",
    "is_valid_http_url",
    "round_multiple",
    "validate_value",
]
