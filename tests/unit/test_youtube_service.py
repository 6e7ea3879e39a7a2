"""Unit tests for YouTube service."""

import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import aiohttp

from sponsor_watch.config.settings import YouTubeConfig
from sponsor_watch.services.youtube import YouTubeService
from sponsor_watch.core.exceptions import YouTubeAPIError, ChannelResolutionError


def search_item(video_id, title, description="", published_at="2024-03-05T01:00:00Z"):
    return {
        "id": {"kind": "youtube#video", "videoId": video_id},
        "snippet": {"title": title, "description": description, "publishedAt": published_at},
    }


@pytest.mark.asyncio
class TestYouTubeService:
    """Test YouTubeService class."""

    @pytest.fixture
    def youtube_config(self):
        """Create test YouTube configuration."""
        return YouTubeConfig(api_url="https://youtube.test/v3/", request_timeout=5.0, max_results=50)

    @pytest.fixture
    def youtube_service(self, youtube_config):
        """Create YouTubeService instance."""
        return YouTubeService(youtube_config)

    @pytest.fixture
    def mock_http_response(self):
        """Create a successful mock HTTP response."""
        response = MagicMock()
        response.status = 200
        response.json = AsyncMock(return_value={"items": []})
        response.text = AsyncMock(return_value="")
        return response

    @pytest.fixture
    def mock_session(self, mock_http_response):
        """Create mock aiohttp session."""
        session = MagicMock()
        session.get.return_value.__aenter__.return_value = mock_http_response
        return session

    async def test_init(self, youtube_service):
        """Test YouTubeService initialization."""
        assert youtube_service.base_url == "https://youtube.test/v3"
        assert youtube_service.timeout.total == 5.0
        assert youtube_service._session is None

    async def test_get_session_reuses_existing(self, youtube_service):
        """Test _get_session reuses an open session."""
        session1 = await youtube_service._get_session()
        session2 = await youtube_service._get_session()

        assert session1 is session2
        assert isinstance(session1, aiohttp.ClientSession)

        await youtube_service.close()
        assert youtube_service._session is None

    async def test_context_manager_closes_session(self, youtube_config):
        async with YouTubeService(youtube_config) as service:
            session = service._session
            assert session is not None

        assert session.closed
        assert service._session is None

    async def test_make_request_success(self, youtube_service, mock_session, mock_http_response):
        """Test successful API request."""
        mock_http_response.json.return_value = {"items": [1]}

        with patch.object(youtube_service, "_get_session", return_value=mock_session):
            result = await youtube_service._make_request("search", {"q": "x"})

        assert result == {"items": [1]}
        mock_session.get.assert_called_once_with("https://youtube.test/v3/search", params={"q": "x"})

    async def test_make_request_error_status(self, youtube_service, mock_session, mock_http_response):
        """Test API error extracts the message from the response body."""
        body = json.dumps({"error": {"code": 403, "message": "quotaExceeded"}})
        mock_http_response.status = 403
        mock_http_response.text.return_value = body

        with patch.object(youtube_service, "_get_session", return_value=mock_session):
            with pytest.raises(YouTubeAPIError) as exc_info:
                await youtube_service._make_request("search", {})

        assert exc_info.value.message == "quotaExceeded"
        assert exc_info.value.status_code == 403
        assert exc_info.value.response_body == body

    async def test_make_request_error_without_json_body(self, youtube_service, mock_session, mock_http_response):
        mock_http_response.status = 500
        mock_http_response.text.return_value = "Internal Server Error"

        with patch.object(youtube_service, "_get_session", return_value=mock_session):
            with pytest.raises(YouTubeAPIError) as exc_info:
                await youtube_service._make_request("search", {})

        assert "GET https://youtube.test/v3/search" in exc_info.value.message

    @pytest.mark.parametrize("error,fragment", [
        (asyncio.TimeoutError(), "timed out"),
        (aiohttp.ClientConnectionError("refused"), "Network error"),
    ])
    async def test_make_request_transport_errors(self, youtube_service, mock_session, error, fragment):
        mock_session.get.side_effect = error

        with patch.object(youtube_service, "_get_session", return_value=mock_session):
            with pytest.raises(YouTubeAPIError) as exc_info:
                await youtube_service._make_request("search", {})

        assert fragment in exc_info.value.message
        assert exc_info.value.status_code is None

    async def test_resolve_channel_uses_top_hit(self, youtube_service):
        response = {"items": [{"id": {"kind": "youtube#channel", "channelId": "UC123"}}]}

        with patch.object(youtube_service, "_make_request", new=AsyncMock(return_value=response)) as request:
            channel_id = await youtube_service.resolve_channel("Some Channel", "key")

        assert channel_id == "UC123"
        endpoint, params = request.call_args.args
        assert endpoint == "search"
        assert params["q"] == "Some Channel"
        assert params["type"] == "channel"
        assert params["maxResults"] == 1
        assert params["key"] == "key"

    async def test_resolve_channel_no_match(self, youtube_service):
        with patch.object(youtube_service, "_make_request", new=AsyncMock(return_value={"items": []})):
            assert await youtube_service.resolve_channel("Nobody", "key") is None

    async def test_resolve_channel_api_failure(self, youtube_service):
        error = YouTubeAPIError("keyInvalid", status_code=400)

        with patch.object(youtube_service, "_make_request", new=AsyncMock(side_effect=error)):
            with pytest.raises(ChannelResolutionError) as exc_info:
                await youtube_service.resolve_channel("Some Channel", "bad")

        assert exc_info.value.channel == "Some Channel"
        assert exc_info.value.__cause__ is error

    async def test_list_recent_videos(self, youtube_service):
        response = {"items": [
            search_item("v2", "Tom &amp; Jerry &quot;ad&quot;", "desc &lt;3", "2024-03-06T12:00:00Z"),
            search_item("v1", "Older", None),
        ]}
        after = datetime(2024, 3, 1, tzinfo=timezone.utc)

        with patch.object(youtube_service, "_make_request", new=AsyncMock(return_value=response)) as request:
            videos = await youtube_service.list_recent_videos("UC123", "key", after, limit=50, order="date")

        params = request.call_args.args[1]
        assert params["channelId"] == "UC123"
        assert params["type"] == "video"
        assert params["publishedAfter"] == "2024-03-01T00:00:00Z"
        assert params["maxResults"] == 50
        assert params["order"] == "date"

        assert [v.video_id for v in videos] == ["v2", "v1"]
        assert videos[0].title == 'Tom & Jerry "ad"'
        assert videos[0].description == "desc <3"
        assert videos[0].published_at == datetime(2024, 3, 6, 12, 0, tzinfo=timezone.utc)
        assert videos[0].url == "https://www.youtube.com/watch?v=v2"
        assert videos[1].description == ""

    async def test_list_recent_videos_caps_limit(self, youtube_config):
        youtube_config.max_results = 10
        service = YouTubeService(youtube_config)

        with patch.object(service, "_make_request", new=AsyncMock(return_value={})) as request:
            videos = await service.list_recent_videos("UC123", "key", datetime(2024, 1, 1), limit=50)

        assert videos == []
        assert request.call_args.args[1]["maxResults"] == 10

    async def test_verify_api_key_ok(self, youtube_service):
        with patch.object(youtube_service, "_make_request", new=AsyncMock(return_value={"items": []})):
            assert await youtube_service.verify_api_key("key") == (True, "OK")

    async def test_verify_api_key_empty(self, youtube_service):
        valid, message = await youtube_service.verify_api_key("")

        assert valid is False
        assert message == "未提供 API 金鑰"

    async def test_verify_api_key_rejected(self, youtube_service):
        body = json.dumps({"error": {"message": "API key not valid."}})
        error = YouTubeAPIError("API key not valid.", status_code=400, response_body=body)

        with patch.object(youtube_service, "_make_request", new=AsyncMock(side_effect=error)):
            assert await youtube_service.verify_api_key("bad") == (False, "API key not valid.")

    async def test_verify_api_key_network_failure(self, youtube_service):
        error = YouTubeAPIError("Network error communicating with YouTube: refused")

        with patch.object(youtube_service, "_make_request", new=AsyncMock(side_effect=error)):
            assert await youtube_service.verify_api_key("key") == (False, "金鑰無效")


class TestYouTubeDatetime:
    """Test timestamp helpers."""

    def test_parse(self):
        parsed = YouTubeService._parse_youtube_datetime("2024-03-05T01:02:03Z")

        assert parsed == datetime(2024, 3, 5, 1, 2, 3, tzinfo=timezone.utc)

    def test_format_naive_as_utc(self):
        assert YouTubeService._format_youtube_datetime(datetime(2024, 3, 5, 1, 2, 3)) == "2024-03-05T01:02:03Z"
