"""
X timeline fetcher.

Pulls the authenticated user's reverse-chronological home timeline through
the v2 API (OAuth 1.0a user context) and joins each post with its author's
handle and verification flag from the `includes.users` expansion.
"""

from __future__ import annotations

from typing import Any

import httpx
from oauthlib.oauth1 import SIGNATURE_HMAC, Client
from pydantic import ValidationError

from x_news_agent.agent.state import RunLog
from x_news_agent.core.config import Settings
from x_news_agent.core.errors import FetchError
from x_news_agent.core.logging import get_logger
from x_news_agent.schemas.schemas import Post

logger = get_logger(__name__)

TIMELINE_URL = "https://api.twitter.com/2/users/me/timelines/reverse_chronological"
MAX_RESULTS = 50
TIMELINE_PARAMS = {
    "max_results": str(MAX_RESULTS),
    "tweet.fields": "created_at,author_id,public_metrics",
    "user.fields": "username,verified",
    "expansions": "author_id",
    "exclude": "replies,retweets",
}


def join_authors(data: list[dict[str, Any]], users: list[dict[str, Any]]) -> list[Post]:
    """Attach author handle/verified flag to each raw post ("unknown"/False if absent)."""
    users_by_id = {str(u.get("id")): u for u in users}
    posts: list[Post] = []
    for raw in data[:MAX_RESULTS]:
        author = users_by_id.get(str(raw.get("author_id")), {})
        posts.append(
            Post(
                id=str(raw["id"]),
                text=raw.get("text", ""),
                author_id=str(raw.get("author_id", "")),
                created_at=raw.get("created_at"),
                public_metrics=raw.get("public_metrics") or {},
                author_username=author.get("username") or "unknown",
                author_verified=bool(author.get("verified", False)),
            )
        )
    return posts


class TimelineService:
    def __init__(
        self,
        settings: Settings,
        run_log: RunLog,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.run_log = run_log
        self._transport = transport

    def _signed_headers(self, url: str) -> dict[str, str]:
        """OAuth 1.0a HMAC-SHA1 Authorization header for a GET on `url`."""
        client = Client(
            self.settings.x_api_key,
            client_secret=self.settings.x_api_secret,
            resource_owner_key=self.settings.x_access_token,
            resource_owner_secret=self.settings.x_access_token_secret,
            signature_method=SIGNATURE_HMAC,
        )
        _, headers, _ = client.sign(
            url, http_method="GET", headers={"Content-Type": "application/json"}
        )
        return headers

    async def fetch_timeline(self) -> list[Post]:
        """Fetch up to 50 recent non-reply, non-repost posts. Raises FetchError."""
        self.run_log.add("Fetching X timeline...", "info")
        try:
            posts = await self._fetch()
        except FetchError as e:
            self.run_log.add(f"X API error: {e}", "error")
            logger.error("timeline_fetch_error", status_code=e.status_code, error=e.message)
            raise

        self.run_log.add(f"Retrieved {len(posts)} timeline posts", "success")
        logger.info("timeline_fetched", post_count=len(posts))
        return posts

    async def _fetch(self) -> list[Post]:
        if not self.settings.has_x_credentials:
            raise FetchError(None, "X API credentials are not configured")

        url = str(httpx.URL(TIMELINE_URL, params=TIMELINE_PARAMS))
        headers = self._signed_headers(url)

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.timeline_timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise FetchError(None, f"request failed: {e}") from e

        if not resp.is_success:
            raise FetchError(resp.status_code, resp.reason_phrase)

        try:
            body = resp.json()
        except ValueError as e:
            raise FetchError(resp.status_code, "response body is not valid JSON") from e
        if not isinstance(body, dict):
            raise FetchError(resp.status_code, "unexpected timeline payload")

        data = body.get("data") or []
        users = (body.get("includes") or {}).get("users") or []
        try:
            return join_authors(data, users)
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise FetchError(resp.status_code, f"unexpected timeline payload: {e}") from e
