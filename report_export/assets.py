"""
Asset pipeline

Replaces external image URLs in widget props with base64 data URLs so the
exported document renders offline. Fetch failures never abort an export: the
original URL is kept and the failure is recorded.
"""
import asyncio
import base64
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import httpx

from core.config import get_settings
from core.exceptions import AssetFetchError
from core.logging import get_logger
from core.metrics import metrics
from report_export.models import WidgetTree

logger = get_logger(__name__, domain="report_export")

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "bmp": "image/bmp",
    "ico": "image/x-icon",
    "tiff": "image/tiff",
    "tif": "image/tiff",
}
DEFAULT_MIME_TYPE = "image/png"

IMAGE_PROPS = ("src", "url", "imageUrl", "image", "backgroundImage")
_IMAGE_EXTENSION = re.compile(r"\.(png|jpg|jpeg|gif|webp|svg|bmp)$", re.IGNORECASE)


@dataclass
class ProcessedAssets:
    """Original URL to data URL substitutions plus per-URL failures"""

    images: Dict[str, str] = field(default_factory=dict)
    errors: List[Dict[str, str]] = field(default_factory=list)


def is_data_url(url: str) -> bool:
    return url.startswith("data:")


def is_external_url(url: Optional[str]) -> bool:
    if not url or is_data_url(url):
        return False
    return url.startswith(("http://", "https://"))


def get_mime_type(url_or_extension: str) -> str:
    """MIME type from a file extension, ignoring any query string"""
    extension = url_or_extension.rsplit(".", 1)[-1].lower().split("?")[0]
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


@asynccontextmanager
async def _client_scope(client: Optional[httpx.AsyncClient]) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.asset_fetch_timeout, follow_redirects=True) as owned:
        yield owned


async def image_to_base64(url: str, client: httpx.AsyncClient) -> str:
    """
    Fetch an image and encode it as a data URL

    Raises:
        AssetFetchError: On transport errors, non-2xx responses or non-image content types
    """
    if is_data_url(url):
        return url

    try:
        response = await client.get(url, headers={"Accept": "image/*"})
    except httpx.HTTPError as e:
        raise AssetFetchError(url, f"Failed to fetch image: {e}")

    if not response.is_success:
        raise AssetFetchError(
            url,
            f"Failed to fetch image: {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
        )

    content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type and not content_type.startswith("image/"):
        raise AssetFetchError(url, f"Failed to fetch image: unexpected content type {content_type}")
    mime_type = content_type or get_mime_type(url)
    encoded = base64.b64encode(response.content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


async def _process(
    url: str,
    client: httpx.AsyncClient,
    convert_external: bool,
    max_size_bytes: Optional[int],
) -> Tuple[str, Optional[str]]:
    if is_data_url(url):
        if max_size_bytes and len(url) > max_size_bytes:
            logger.warning(f"Image exceeds max size: {len(url)} > {max_size_bytes}")
        return url, None
    if not is_external_url(url) or not convert_external:
        return url, None

    try:
        return await image_to_base64(url, client), None
    except AssetFetchError as e:
        logger.warning(f"Failed to inline image, using original URL: {url}", extra={"error": e.message})
        return url, e.message


async def process_image_url(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    convert_external: bool = True,
    max_size_bytes: Optional[int] = None,
) -> str:
    """Data URL for ``url``; relative URLs and failed fetches come back unchanged"""
    async with _client_scope(client) as scoped:
        processed, _ = await _process(url, scoped, convert_external, max_size_bytes)
    return processed


async def _process_many(
    urls: List[str],
    client: httpx.AsyncClient,
    concurrency: int,
    convert_external: bool,
) -> List[Tuple[str, Optional[str]]]:
    results: List[Tuple[str, Optional[str]]] = []
    for start in range(0, len(urls), concurrency):
        batch = urls[start : start + concurrency]
        outcomes = await asyncio.gather(
            *(_process(url, client, convert_external, None) for url in batch),
            return_exceptions=True,
        )
        for url, outcome in zip(batch, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Unexpected error inlining {url}: {outcome}")
                results.append((url, str(outcome)))
            else:
                results.append(outcome)
    return results


async def process_image_urls(
    urls: List[str],
    client: Optional[httpx.AsyncClient] = None,
    concurrency: Optional[int] = None,
    convert_external: bool = True,
) -> List[str]:
    """Process URLs in sequential batches of ``concurrency`` concurrent fetches"""
    concurrency = max(concurrency or get_settings().asset_fetch_concurrency, 1)
    async with _client_scope(client) as scoped:
        results = await _process_many(list(urls), scoped, concurrency, convert_external)
    return [processed for processed, _ in results]


def _looks_like_image(value: str) -> bool:
    return value.startswith(("http", "data:image")) or bool(_IMAGE_EXTENSION.search(value))


def extract_image_urls(props: Dict[str, Any]) -> List[str]:
    """Unique image-like URLs held by the image props (``IMAGE_PROPS``) of a widget"""
    urls: List[str] = []

    def collect(value: Any) -> None:
        if isinstance(value, str):
            if _looks_like_image(value):
                urls.append(value)
        elif isinstance(value, (list, tuple)):
            for item in value:
                collect(item)
        elif isinstance(value, dict):
            for item in value.values():
                collect(item)

    for prop in IMAGE_PROPS:
        if props.get(prop):
            collect(props[prop])
    return list(dict.fromkeys(urls))


def _substitute_value(value: Any, images: Dict[str, str]) -> Any:
    if isinstance(value, str):
        return images.get(value, value)
    if isinstance(value, list):
        return [_substitute_value(item, images) for item in value]
    if isinstance(value, dict):
        return {key: _substitute_value(item, images) for key, item in value.items()}
    return value


def _substitute(props: Dict[str, Any], images: Dict[str, str]) -> Dict[str, Any]:
    return {key: _substitute_value(value, images) if key in IMAGE_PROPS else value for key, value in props.items()}


async def inline_tree_assets(
    tree: WidgetTree,
    client: Optional[httpx.AsyncClient] = None,
    concurrency: Optional[int] = None,
) -> Tuple[WidgetTree, ProcessedAssets]:
    """Copy of ``tree`` with external image URLs replaced by data URLs"""
    all_urls: List[str] = []
    for node in tree.nodes.values():
        all_urls.extend(extract_image_urls(node.props))
    urls = [url for url in dict.fromkeys(all_urls) if is_external_url(url)]

    assets = ProcessedAssets()
    if not urls:
        return tree, assets

    concurrency = max(concurrency or get_settings().asset_fetch_concurrency, 1)
    async with _client_scope(client) as scoped:
        results = await _process_many(urls, scoped, concurrency, True)

    for url, (processed, error) in zip(urls, results):
        metrics.track_asset(success=not error)
        if error:
            assets.errors.append({"url": url, "error": error})
        elif processed != url:
            assets.images[url] = processed

    logger.info(
        f"Inlined {len(assets.images)} of {len(urls)} images",
        extra={"failed": len(assets.errors)},
    )
    if not assets.images:
        return tree, assets

    nodes = {
        key: node.model_copy(update={"props": _substitute(node.props, assets.images)})
        for key, node in tree.nodes.items()
    }
    return tree.model_copy(update={"nodes": nodes}), assets
