import httpx
import pytest

from portfolio.config import YouTubeConfig
from portfolio.errors import ConfigurationError, ExternalServiceError, NotFoundError
from portfolio.services.youtube import YouTubeClient, extract_video_id

VIDEO_RESPONSE = {
    "items": [{
        "snippet": {
            "title": "Never Gonna Give You Up",
            "channelTitle": "Rick Astley",
            "description": "The official video",
            "publishedAt": "2009-10-25T06:57:33Z",
            "thumbnails": {
                "default": {"url": "https://i.ytimg.com/vi/x/default.jpg"},
                "medium": {"url": "https://i.ytimg.com/vi/x/mqdefault.jpg"},
            },
        },
        "contentDetails": {"duration": "PT3M33S"},
    }]
}


def make_client(handler, api_key="test-key", attempts=3) -> YouTubeClient:
    config = YouTubeConfig(api_key=api_key, retry_attempts=attempts)
    http = httpx.AsyncClient(base_url=config.api_base_url, transport=httpx.MockTransport(handler))
    return YouTubeClient(config, client=http, retry_min_wait=0, retry_max_wait=0)


@pytest.mark.parametrize("url,expected", [
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42s", "dQw4w9WgXcQ"),
    ("https://youtu.be/dQw4w9WgXcQ?si=abc", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://vimeo.com/12345", None),
    ("not a url", None),
])
def test_extract_video_id(url, expected):
    assert extract_video_id(url) == expected


@pytest.mark.asyncio
async def test_get_video_metadata_maps_snippet():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=VIDEO_RESPONSE)

    client = make_client(handler)
    metadata = await client.get_video_metadata("dQw4w9WgXcQ")

    assert seen["path"].endswith("/youtube/v3/videos")
    assert seen["params"]["part"] == "snippet,contentDetails"
    assert seen["params"]["id"] == "dQw4w9WgXcQ"
    assert seen["params"]["key"] == "test-key"
    assert metadata.title == "Never Gonna Give You Up"
    assert metadata.channel_title == "Rick Astley"
    assert metadata.thumbnail_url.endswith("mqdefault.jpg")
    assert metadata.duration == "PT3M33S"


@pytest.mark.asyncio
async def test_missing_api_key_raises_configuration_error():
    client = make_client(lambda request: httpx.Response(200, json=VIDEO_RESPONSE), api_key=None)
    with pytest.raises(ConfigurationError, match="YouTube API key not configured"):
        await client.get_video_metadata("abc")


@pytest.mark.asyncio
async def test_empty_items_raises_not_found():
    client = make_client(lambda request: httpx.Response(200, json={"items": []}))
    with pytest.raises(NotFoundError, match="Video not found"):
        await client.get_video_metadata("abc")


@pytest.mark.asyncio
async def test_server_errors_are_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json=VIDEO_RESPONSE)

    metadata = await make_client(handler).get_video_metadata("abc")
    assert len(calls) == 3
    assert metadata.video_id == "abc"


@pytest.mark.asyncio
async def test_client_errors_fail_without_retry():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(403, json={"error": "quota"})

    with pytest.raises(ExternalServiceError):
        await make_client(handler).get_video_metadata("abc")
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_retries_exhausted_raise_external_service_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExternalServiceError):
        await make_client(handler, attempts=2).get_video_metadata("abc")
