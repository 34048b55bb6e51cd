"""
Tests for the image inlining pipeline
"""
import base64

import httpx
import pytest
import pytest_asyncio

from core.exceptions import AssetFetchError
from report_export.assets import (
    extract_image_urls,
    get_mime_type,
    image_to_base64,
    inline_tree_assets,
    is_external_url,
    process_image_url,
    process_image_urls,
)
from report_export.models import WidgetTree

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/ok.png"):
        return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})
    if path.endswith("/photo"):
        return httpx.Response(200, content=b"jpeg", headers={"content-type": "image/jpeg; charset=binary"})
    if path.endswith("/page.png"):
        return httpx.Response(200, content=b"html", headers={"content-type": "text/html"})
    if path.endswith("/bare.svg"):
        return httpx.Response(200, content=b"<svg/>")
    if path.endswith("/down.png"):
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(404)


@pytest_asyncio.fixture
async def client():
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as mock_client:
        yield mock_client


class TestUrlHelpers:
    def test_is_external_url(self):
        assert is_external_url("https://cdn.test/a.png")
        assert is_external_url("http://cdn.test/a.png")
        assert not is_external_url("data:image/png;base64,AAAA")
        assert not is_external_url("images/a.png")
        assert not is_external_url(None)

    def test_get_mime_type(self):
        assert get_mime_type("https://cdn.test/logo.SVG?v=2") == "image/svg+xml"
        assert get_mime_type("photo.jpeg") == "image/jpeg"
        assert get_mime_type("file.unknown") == "image/png"

    def test_extract_image_urls(self):
        props = {
            "src": "https://cdn.test/a.png",
            "image": {"logo": "logo.svg", "images": ["https://cdn.test/a.png", "data:image/gif;base64,R0"]},
        }
        assert extract_image_urls(props) == ["https://cdn.test/a.png", "logo.svg", "data:image/gif;base64,R0"]

    def test_non_image_props_are_not_scanned(self):
        props = {"text": "https://acme.example", "link": "https://cdn.test/a.png", "nested": {"logo": "logo.svg"}}
        assert extract_image_urls(props) == []


class TestImageToBase64:
    """Test fetching and encoding single images"""

    @pytest.mark.asyncio
    async def test_encodes_response(self, client):
        data_url = await image_to_base64("https://cdn.test/ok.png", client)
        assert data_url == "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")

    @pytest.mark.asyncio
    async def test_content_type_parameters_are_dropped(self, client):
        assert (await image_to_base64("https://cdn.test/photo", client)).startswith("data:image/jpeg;base64,")

    @pytest.mark.asyncio
    async def test_non_image_content_type_is_rejected(self, client):
        with pytest.raises(AssetFetchError) as exc_info:
            await image_to_base64("https://cdn.test/page.png", client)
        assert "text/html" in exc_info.value.message
        assert await process_image_url("https://cdn.test/page.png", client) == "https://cdn.test/page.png"

    @pytest.mark.asyncio
    async def test_missing_content_type_uses_extension(self, client):
        assert (await image_to_base64("https://cdn.test/bare.svg", client)).startswith("data:image/svg+xml;base64,")

    @pytest.mark.asyncio
    async def test_http_error_status(self, client):
        with pytest.raises(AssetFetchError) as exc_info:
            await image_to_base64("https://cdn.test/missing.png", client)
        assert exc_info.value.details["api_status_code"] == 404
        assert exc_info.value.url == "https://cdn.test/missing.png"

    @pytest.mark.asyncio
    async def test_transport_error(self, client):
        with pytest.raises(AssetFetchError):
            await image_to_base64("https://cdn.test/down.png", client)

    @pytest.mark.asyncio
    async def test_data_url_passthrough(self, client):
        assert await image_to_base64("data:image/png;base64,AAAA", client) == "data:image/png;base64,AAAA"


class TestProcessImageUrls:
    @pytest.mark.asyncio
    async def test_failures_keep_original_url(self, client):
        assert await process_image_url("https://cdn.test/missing.png", client) == "https://cdn.test/missing.png"
        assert await process_image_url("images/local.png", client) == "images/local.png"

    @pytest.mark.asyncio
    async def test_convert_external_disabled(self, client):
        assert await process_image_url("https://cdn.test/ok.png", client, convert_external=False) == (
            "https://cdn.test/ok.png"
        )

    @pytest.mark.asyncio
    async def test_batches_preserve_order(self, client):
        urls = ["https://cdn.test/missing.png", "https://cdn.test/ok.png", "local.png", "https://cdn.test/down.png"]
        results = await process_image_urls(urls, client, concurrency=2)
        assert results[0] == urls[0]
        assert results[1].startswith("data:image/png;base64,")
        assert results[2:] == urls[2:]


class TestInlineTreeAssets:
    """Test inlining images across a widget tree"""

    @pytest.mark.asyncio
    async def test_inlines_and_records_failures(self, client):
        tree = WidgetTree.from_payload(
            {
                "logo": {"type": "Image", "props": {"src": "https://cdn.test/ok.png"}},
                "hero": {"type": "Image", "props": {"src": "https://cdn.test/missing.png"}},
                "copy": {"type": "Image", "props": {"src": "https://cdn.test/ok.png", "alt": "Again"}},
            }
        )
        inlined, assets = await inline_tree_assets(tree, client=client)

        assert inlined.nodes["logo"].props["src"].startswith("data:image/png;base64,")
        assert inlined.nodes["copy"].props["src"] == inlined.nodes["logo"].props["src"]
        assert inlined.nodes["hero"].props["src"] == "https://cdn.test/missing.png"
        assert list(assets.images) == ["https://cdn.test/ok.png"]
        assert [error["url"] for error in assets.errors] == ["https://cdn.test/missing.png"]
        # Input tree is untouched
        assert tree.nodes["logo"].props["src"] == "https://cdn.test/ok.png"

    @pytest.mark.asyncio
    async def test_tree_without_external_images(self, client):
        tree = WidgetTree.from_payload({"t": {"type": "Text", "props": {"text": "hi"}}})
        inlined, assets = await inline_tree_assets(tree, client=client)
        assert inlined is tree
        assert assets.images == {}
        assert assets.errors == []

    @pytest.mark.asyncio
    async def test_only_image_props_are_rewritten(self, client):
        tree = WidgetTree.from_payload(
            {
                "logo": {"type": "Image", "props": {"src": "https://cdn.test/ok.png"}},
                "caption": {"type": "Text", "props": {"text": "https://cdn.test/ok.png"}},
                "site": {"type": "Text", "props": {"text": "https://acme.example"}},
            }
        )
        inlined, assets = await inline_tree_assets(tree, client=client)

        assert inlined.nodes["logo"].props["src"].startswith("data:image/png;base64,")
        assert inlined.nodes["caption"].props["text"] == "https://cdn.test/ok.png"
        assert inlined.nodes["site"].props["text"] == "https://acme.example"
        assert list(assets.images) == ["https://cdn.test/ok.png"]
        assert assets.errors == []

    @pytest.mark.asyncio
    async def test_non_image_response_keeps_url(self, client):
        tree = WidgetTree.from_payload({"img": {"type": "Image", "props": {"src": "https://cdn.test/page.png"}}})
        inlined, assets = await inline_tree_assets(tree, client=client)
        assert inlined is tree
        assert [error["url"] for error in assets.errors] == ["https://cdn.test/page.png"]
