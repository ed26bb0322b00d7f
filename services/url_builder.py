"""
PhotoSynth transformation URL builder.

Every transformation parameter is declared once below with its short code and
validation rule. The builder walks that table and silently drops any value
that fails its rule; only the key, the endpoint and the source URL are fatal.
"""
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union
from urllib.parse import urlsplit

from config import DEFAULT_PHOTOSYNTH_URL, Settings, get_settings
from models.transform import FORMATS, ErrorKind, TransformRequest, TransformResult

logger = logging.getLogger(__name__)

DIMENSION_FLOOR = 64
DIMENSION_STEP = 128

# separator name -> (text between endpoint and first fragment, fragment joiner)
SEPARATORS = {
    "query": ("?", "&"),
    "path": ("/", ","),
}


class PhotoSynthError(Exception):
    kind: ErrorKind
    message: str

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class MissingKeyError(PhotoSynthError):
    kind = ErrorKind.MISSING_KEY
    message = "Please provide the PhotoSynth key"


class InvalidEndpointError(PhotoSynthError):
    kind = ErrorKind.INVALID_ENDPOINT
    message = "Please provide a valid PhotoSynth URL"


class InvalidSourceUrlError(PhotoSynthError):
    kind = ErrorKind.INVALID_SOURCE_URL
    message = "Please provide a valid image URL"


def validate_value(
    value: Any,
    kind: str = "int",
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    optional: bool = True,
) -> bool:
    """
    Check a parameter value against its rule.

    Falsy values (None, 0, "", False) and non-finite floats count as absent
    and are rejected when the value is optional, even if 0 lies inside the
    range. Kinds: "int" (whole numbers, including whole floats), "float" (any
    finite real number), "string" and "bool". Bounds are inclusive and only
    apply to numeric kinds.
    """
    if optional and (not value or (isinstance(value, float) and not math.isfinite(value))):
        return False
    if kind == "string":
        return isinstance(value, str)
    if kind == "bool":
        return isinstance(value, bool)
    # bool is an int subclass but never a number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if kind == "int":
        if isinstance(value, float) and not value.is_integer():
            return False
    elif kind != "float":
        return False
    if maximum is not None and value > maximum:
        return False
    if minimum is not None and value < minimum:
        return False
    return True


def is_valid_http_url(s: Any) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not isinstance(s, str):
        return False
    try:
        parts = urlsplit(s)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def round_multiple(value: float) -> int:
    """Round a dimension up to the next multiple of 128, never below 64."""
    if value <= DIMENSION_FLOOR:
        return DIMENSION_FLOOR
    return math.ceil(value / DIMENSION_STEP) * DIMENSION_STEP


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class ValidationRule:
    kind: str = "int"
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def check(self, value: Any) -> bool:
        return validate_value(value, self.kind, self.minimum, self.maximum)


@dataclass(frozen=True)
class Parameter:
    field: str
    code: str
    rule: ValidationRule
    choices: Optional[Tuple[str, ...]] = None

    @property
    def field_names(self) -> Tuple[str, ...]:
        return (self.field,)

    def encode(self, request: TransformRequest) -> Optional[str]:
        value = getattr(request, self.field)
        if not self.rule.check(value):
            return None
        if self.choices is not None and value not in self.choices:
            return None
        return _format_value(value)


@dataclass(frozen=True)
class CompositeParameter:
    """Several fields emitted as one comma-joined value.

    mode "any": emitted when at least one field validates; the others are
    written as 0. mode "ascending": emitted only when every field validates
    and the values strictly increase.
    """

    fields: Tuple[str, ...]
    code: str
    rule: ValidationRule
    mode: str = "any"

    @property
    def field_names(self) -> Tuple[str, ...]:
        return self.fields

    def encode(self, request: TransformRequest) -> Optional[str]:
        values = [getattr(request, name) for name in self.fields]
        valid = [self.rule.check(v) for v in values]
        if self.mode == "ascending":
            if not all(valid) or not all(a < b for a, b in zip(values, values[1:])):
                return None
        elif not any(valid):
            return None
        return ",".join(_format_value(v) if ok else "0" for v, ok in zip(values, valid))


WIDTH = Parameter("width", "w", ValidationRule("int", 1, 5000))
HEIGHT = Parameter("height", "h", ValidationRule("int", 1, 5000))
# Layout measurements are fractional pixels; any positive number is rounded
# up to a whole width before it is checked against the width rule.
MEASURED_WIDTH = Parameter("measured_width", "w", ValidationRule("float", 0))

PARAMETERS: Tuple[Union[Parameter, CompositeParameter], ...] = (
    Parameter("adaptive_histogram", "ah", ValidationRule("int", 0, 100)),
    Parameter("blur", "b", ValidationRule("float", 0.2, 20)),
    Parameter("brightness", "br", ValidationRule("float", 0, 20)),
    CompositeParameter(
        ("crop_left_percent", "crop_top_percent", "crop_right_percent", "crop_bottom_percent"),
        "c",
        ValidationRule("int", 1, 99),
    ),
    Parameter("gamma", "ga", ValidationRule("float", 1, 3)),
    Parameter("hue", "hu", ValidationRule("float", 1, 180)),
    Parameter("lightness", "l", ValidationRule("float", 0, 200)),
    CompositeParameter(
        ("normalize_lower", "normalize_upper"),
        "n",
        ValidationRule("int", 1, 99),
        mode="ascending",
    ),
    Parameter("rotate", "r", ValidationRule("float", -360, 360)),
    Parameter("saturation", "s", ValidationRule("float", 0, 20)),
    Parameter("sharpen", "sh", ValidationRule("float", 0.1, 10)),
    Parameter("greyscale", "gr", ValidationRule("bool")),
    Parameter("format", "o", ValidationRule("string"), choices=FORMATS),
)


class UrlBuilder:
    def __init__(
        self,
        key: Optional[str] = None,
        endpoint: str = DEFAULT_PHOTOSYNTH_URL,
        separator: str = "query",
        rotate: bool = True,
        bypass: bool = True,
        cache_bust: bool = True,
        clock: Callable[[], int] = time.time_ns,
    ):
        if separator not in SEPARATORS:
            raise ValueError(f"Unknown separator style: {separator!r}")
        self.key = key
        self.endpoint = endpoint
        self.separator = separator
        self.bypass = bypass
        self.cache_bust = cache_bust
        self.clock = clock
        self.parameters = tuple(p for p in PARAMETERS if rotate or p.code != "r")

    @classmethod
    def from_settings(cls, settings: Settings) -> "UrlBuilder":
        return cls(
            key=settings.photosynth_key,
            endpoint=settings.photosynth_url,
            separator=settings.photosynth_separator,
            rotate=settings.photosynth_rotate_enabled,
            bypass=settings.photosynth_bypass_enabled,
            cache_bust=settings.photosynth_cache_bust_enabled,
        )

    def build(self, request: TransformRequest) -> TransformResult:
        """Build the transformation URL, or a failure result for a missing key or bad URL."""
        if self.bypass and request.bypass:
            return TransformResult.success(self._apply_cache_bust(request.source_url, request.cache_bust))

        try:
            key = self._resolve_key(request)
            self._check_urls(request.source_url)
        except PhotoSynthError as e:
            logger.warning(
                "PhotoSynth URL not built: %s",
                e,
                extra={"error_kind": e.kind.value},
            )
            return TransformResult.failure(e.kind, str(e))

        fragments = [f"u={request.source_url}", f"k={key}"]
        dimension = self._dimension_fragment(request)
        if dimension:
            fragments.append(dimension)
        for param in self.parameters:
            value = param.encode(request)
            if value is not None:
                fragments.append(f"{param.code}={value}")
            elif any(getattr(request, name) is not None for name in param.field_names):
                logger.debug("Dropping invalid PhotoSynth parameter %s", param.code)

        lead, joiner = SEPARATORS[self.separator]
        url = self.endpoint.rstrip("/") + lead + joiner.join(fragments)
        return TransformResult.success(self._apply_cache_bust(url, request.cache_bust))

    def _resolve_key(self, request: TransformRequest) -> str:
        key = request.key if request.key is not None else self.key
        if not key:
            raise MissingKeyError()
        return key

    def _check_urls(self, source_url: str) -> None:
        if not is_valid_http_url(self.endpoint):
            raise InvalidEndpointError()
        if not is_valid_http_url(source_url):
            raise InvalidSourceUrlError()

    def _dimension_fragment(self, request: TransformRequest) -> Optional[str]:
        # Width wins over height so the source aspect ratio is kept.
        if request.width:
            param = WIDTH
        elif request.height:
            param = HEIGHT
        elif request.measured_width:
            return self._measured_width_fragment(request.measured_width)
        else:
            return None
        value = getattr(request, param.field)
        if not param.rule.check(value):
            logger.debug("Dropping invalid PhotoSynth dimension %s=%r", param.field, value)
            return None
        size = min(round_multiple(value), int(param.rule.maximum))
        return f"{param.code}={size}"

    def _measured_width_fragment(self, measured: Any) -> Optional[str]:
        if not MEASURED_WIDTH.rule.check(measured):
            logger.debug("Dropping invalid PhotoSynth dimension measured_width=%r", measured)
            return None
        size = min(round_multiple(measured), int(WIDTH.rule.maximum))
        if not WIDTH.rule.check(size):
            return None
        return f"{WIDTH.code}={size}"

    def _apply_cache_bust(self, url: str, directive: Union[bool, str, None]) -> str:
        """Append none=<token>, joined with "&" when the URL already has a query string, else "?"."""
        if not self.cache_bust:
            return url
        if directive is True:
            token = str(self.clock())
        elif isinstance(directive, str) and directive:
            token = directive
        else:
            return url
        return f"{url}{'&' if '?' in url else '?'}none={token}"


def generate_url(request: TransformRequest, settings: Optional[Settings] = None) -> TransformResult:
    """Build a URL with the process-wide PhotoSynth settings."""
    return UrlBuilder.from_settings(settings or get_settings()).build(request)
