"""YouTube Data API service implementation."""

import asyncio
import html
import json
from datetime import datetime, timezone
from typing import List, Optional, Dict, Tuple, Any
import aiohttp

from sponsor_watch.core.interfaces import IVideoSource
from sponsor_watch.core.models import VideoItem
from sponsor_watch.core.exceptions import YouTubeAPIError, ChannelResolutionError
from sponsor_watch.config.settings import YouTubeConfig


class YouTubeService(IVideoSource):
    """Handles all YouTube Data API interactions for channel and video lookup."""

    def __init__(self, config: YouTubeConfig, logger=None):
        """Initialize YouTube service with configuration."""
        self.config = config
        self.base_url = config.api_url.rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=config.request_timeout)
        self.logger = logger
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    @staticmethod
    def _parse_youtube_datetime(date_string: str) -> datetime:
        """Parse an RFC 3339 timestamp such as 2024-01-01T00:00:00Z."""
        parsed = datetime.fromisoformat(date_string.replace('Z', '+00:00'))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def _format_youtube_datetime(value: datetime) -> str:
        """Format a datetime as the RFC 3339 UTC string the API expects."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')

    @staticmethod
    def _error_message(body: str) -> Optional[str]:
        """Extract error.message from an API error body."""
        try:
            return json.loads(body).get("error", {}).get("message")
        except (ValueError, AttributeError):
            return None

    async def _make_request(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Make a GET request to the YouTube Data API."""
        session = await self._get_session()
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            async with session.get(url, params=params) as response:
                if response.status >= 400:
                    text = await response.text()
                    message = self._error_message(text) or f"YouTube API request failed: GET {url}"
                    raise YouTubeAPIError(
                        message,
                        status_code=response.status,
                        response_body=text
                    )
                return await response.json()

        except asyncio.TimeoutError:
            raise YouTubeAPIError(
                f"YouTube API request timed out after {self.config.request_timeout}s: GET {url}"
            )
        except aiohttp.ClientError as e:
            raise YouTubeAPIError(f"Network error communicating with YouTube: {str(e)}")

    async def resolve_channel(self, name: str, api_key: str) -> Optional[str]:
        """Resolve a channel display name to its id using the top search hit."""
        params = {
            "part": "snippet",
            "q": name,
            "type": "channel",
            "maxResults": 1,
            "key": api_key,
        }

        try:
            response = await self._make_request("search", params)
        except YouTubeAPIError as e:
            raise ChannelResolutionError(
                f"Failed to resolve channel '{name}': {e.message}",
                channel=name,
                details={"status_code": e.status_code} if e.status_code else None
            ) from e

        items = response.get("items") or []
        if not items:
            return None
        return (items[0].get("id") or {}).get("channelId")

    async def list_recent_videos(
        self,
        channel_id: str,
        api_key: str,
        after: datetime,
        limit: int = 50,
        order: str = "date"
    ) -> List[VideoItem]:
        """List a channel's videos published after the cutoff, newest first."""
        params = {
            "part": "snippet",
            "channelId": channel_id,
            "type": "video",
            "publishedAfter": self._format_youtube_datetime(after),
            "maxResults": min(limit, self.config.max_results),
            "order": order,
            "key": api_key,
        }

        response = await self._make_request("search", params)
        videos = [self._item_to_video(item) for item in response.get("items") or []]

        if self.logger:
            self.logger.debug(f"Retrieved {len(videos)} videos for channel {channel_id}")

        return videos

    async def verify_api_key(self, api_key: str) -> Tuple[bool, str]:
        """Run a one-result search to check the key is accepted."""
        if not api_key:
            return False, "未提供 API 金鑰"

        params = {"part": "snippet", "q": "test", "maxResults": 1, "key": api_key}
        try:
            await self._make_request("search", params)
        except YouTubeAPIError as e:
            if e.response_body:
                return False, self._error_message(e.response_body) or "金鑰無效"
            return False, "金鑰無效"
        return True, "OK"

    def _item_to_video(self, item: Dict[str, Any]) -> VideoItem:
        """Convert a search result item to a VideoItem."""
        snippet = item.get("snippet") or {}
        return VideoItem(
            video_id=(item.get("id") or {}).get("videoId", ""),
            title=html.unescape(snippet.get("title", "")),
            description=html.unescape(snippet.get("description") or ""),
            published_at=self._parse_youtube_datetime(snippet["publishedAt"]),
        )
