"""
FastAPI application exposing the PhotoSynth URL builder.
"""
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, RedirectResponse

from config import get_settings
from models import ErrorKind, PhotoSynthErrorResponse, PhotoSynthUrlResponse, TransformRequest
from services import InvalidSourceUrlError, UrlBuilder, is_valid_http_url

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)
# Reduce noisy per-request logs from httpx/httpcore.
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

_ERROR_STATUS = {
    ErrorKind.MISSING_KEY: 400,
    ErrorKind.INVALID_SOURCE_URL: 400,
    ErrorKind.INVALID_ENDPOINT: 500,
}
_ERROR_RESPONSES = {
    400: {"model": PhotoSynthErrorResponse},
    500: {"model": PhotoSynthErrorResponse},
}


def get_builder() -> UrlBuilder:
    return UrlBuilder.from_settings(get_settings())


def _parse_cache_bust(value: Optional[str]) -> Union[bool, str, None]:
    """Map the query value to a cache-bust directive: true/1 means a time-seeded token, other text is the token."""
    if value is None:
        return None
    value = value.strip()
    if value.lower() in ("true", "1"):
        return True
    if not value or value.lower() in ("false", "0"):
        return None
    return value


def transform_request(
    source_url: str = Query(..., description="URL of the image to transform"),
    key: Optional[str] = Query(None, description="PhotoSynth key; falls back to PHOTOSYNTH_KEY"),
    width: Optional[float] = None,
    height: Optional[float] = None,
    measured_width: Optional[float] = Query(None, description="Rendered width, used when no size is requested"),
    adaptive_histogram: Optional[float] = None,
    blur: Optional[float] = None,
    brightness: Optional[float] = None,
    crop_left_percent: Optional[float] = None,
    crop_top_percent: Optional[float] = None,
    crop_right_percent: Optional[float] = None,
    crop_bottom_percent: Optional[float] = None,
    gamma: Optional[float] = None,
    hue: Optional[float] = None,
    lightness: Optional[float] = None,
    normalize_lower: Optional[float] = None,
    normalize_upper: Optional[float] = None,
    rotate: Optional[float] = None,
    saturation: Optional[float] = None,
    sharpen: Optional[float] = None,
    greyscale: Optional[bool] = None,
    format: Optional[str] = None,
    cache_bust: Optional[str] = Query(None, description='"true" for a time-based token, or a token of your own'),
    bypass: bool = False,
) -> TransformRequest:
    return TransformRequest(
        source_url=source_url,
        key=key,
        width=width,
        height=height,
        measured_width=measured_width,
        adaptive_histogram=adaptive_histogram,
        blur=blur,
        brightness=brightness,
        crop_left_percent=crop_left_percent,
        crop_top_percent=crop_top_percent,
        crop_right_percent=crop_right_percent,
        crop_bottom_percent=crop_bottom_percent,
        gamma=gamma,
        hue=hue,
        lightness=lightness,
        normalize_lower=normalize_lower,
        normalize_upper=normalize_upper,
        rotate=rotate,
        saturation=saturation,
        sharpen=sharpen,
        greyscale=greyscale,
        format=format,
        cache_bust=_parse_cache_bust(cache_bust),
        bypass=bypass,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("PhotoSynth service starting")
    s = get_settings()
    if not s.photosynth_key:
        logger.warning("PhotoSynth: no default key configured (set PHOTOSYNTH_KEY); requests must pass key")
    if not is_valid_http_url(s.photosynth_url):
        logger.warning("PhotoSynth: PHOTOSYNTH_URL %r is not a valid http(s) URL", s.photosynth_url)
    logger.info("PhotoSynth: endpoint %s, %s separator", s.photosynth_url, s.photosynth_separator)
    yield
    logger.info("PhotoSynth service shutting down")


app = FastAPI(
    title="PhotoSynth URL builder",
    description="Build validated PhotoSynth image transformation URLs",
    version="1.0.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health() -> JSONResponse:
    """Lightweight health endpoint for uptime checks."""
    return JSONResponse({"status": "ok"})


@app.get("/api/url", response_model=PhotoSynthUrlResponse, responses=_ERROR_RESPONSES)
async def build_url(
    transform: TransformRequest = Depends(transform_request),
    builder: UrlBuilder = Depends(get_builder),
):
    result = builder.build(transform)
    if not result.ok:
        body = PhotoSynthErrorResponse(detail=result.error, code=result.error_kind.value)
        return JSONResponse(status_code=_ERROR_STATUS[result.error_kind], content=body.model_dump())
    return PhotoSynthUrlResponse(url=result.url)


@app.get("/api/image", response_class=RedirectResponse, status_code=307)
async def image_redirect(
    transform: TransformRequest = Depends(transform_request),
    builder: UrlBuilder = Depends(get_builder),
) -> RedirectResponse:
    """Redirect to the transformed image, or to the untouched source when the builder is misconfigured."""
    # Every redirect target, bypass and fallback included, starts from source_url.
    if not is_valid_http_url(transform.source_url):
        raise HTTPException(status_code=400, detail=InvalidSourceUrlError.message)
    result = builder.build(transform)
    if result.ok:
        return RedirectResponse(result.url, status_code=307)
    logger.warning(
        "Serving untransformed image: %s",
        result.error,
        extra={"source_url": transform.source_url[:80]},
    )
    return RedirectResponse(transform.source_url, status_code=307)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8001,
        reload=True,
    )
