"""
Async wrapper around the Strava REST API.

requests is synchronous; calls run in the default thread pool executor so
they don't block the asyncio event loop (the scheduler and API share it).

Only the refresh-token grant is implemented. The one-time authorization that
produces the refresh token happens outside this package.
"""
import asyncio
import logging
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

API_BASE_URL = "https://www.strava.com/api/v3"
TOKEN_URL = "https://www.strava.com/oauth/token"
REQUEST_TIMEOUT_SECONDS = 30


class StravaAuthError(RuntimeError):
    """Raised when credentials are missing or Strava rejects the refresh token."""


def _epoch(dt: datetime) -> int:
    return int(dt.replace(tzinfo=timezone.utc).timestamp())


class StravaClient:
    """
    Thin async client for the endpoints the dashboard needs.

    The access token is refreshed lazily on the first data call.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        session: Optional[requests.Session] = None,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._session = session or requests.Session()
        self._access_token: Optional[str] = None

    @classmethod
    def from_settings(cls, settings) -> "StravaClient":
        return cls(
            client_id=settings.strava_client_id,
            client_secret=settings.strava_client_secret,
            refresh_token=settings.strava_refresh_token,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self._client_id and self._client_secret and self._refresh_token)

    async def _run(self, fn, *args, **kwargs):
        """Run a blocking requests call in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: fn(*args, **kwargs))

    # ─── Auth ─────────────────────────────────────────────────────────────────

    def _refresh_sync(self) -> Dict[str, Any]:
        response = self._session.post(
            TOKEN_URL,
            json={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "refresh_token": self._refresh_token,
                "grant_type": "refresh_token",
            },
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        if not response.ok:
            raise StravaAuthError(
                f"Failed to refresh token: {response.status_code} {response.reason}"
            )
        return response.json()

    async def refresh_access_token(self) -> str:
        """
        Exchange the refresh token for a short-lived access token.

        Raises:
            StravaAuthError: credentials not configured or rejected.
        """
        if not self.has_credentials:
            raise StravaAuthError(
                "Strava credentials not configured "
                "(STRAVA_CLIENT_ID, STRAVA_CLIENT_SECRET, STRAVA_REFRESH_TOKEN)"
            )
        logger.info("Refreshing Strava access token...")
        data = await self._run(self._refresh_sync)
        self._access_token = data["access_token"]
        # Strava may rotate the refresh token
        self._refresh_token = data.get("refresh_token") or self._refresh_token
        return self._access_token

    # ─── Data ─────────────────────────────────────────────────────────────────

    def _get_sync(self, path: str, params: Dict[str, Any]) -> Any:
        response = self._session.get(
            f"{API_BASE_URL}{path}",
            headers={"Authorization": f"Bearer {self._access_token}"},
            params=params,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return response.json()

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        if self._access_token is None:
            await self.refresh_access_token()
        return await self._run(self._get_sync, path, params)

    async def get_activities(
        self,
        page: int = 1,
        per_page: int = 100,
        after: Optional[datetime] = None,
        before: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch one page of the athlete's activities (all sport types).

        Args:
            page: 1-based page number.
            per_page: Page size (Strava caps this at 200).
            after / before: Optional UTC bounds on start time.
        """
        params: Dict[str, Any] = {"page": page, "per_page": per_page}
        if after is not None:
            params["after"] = _epoch(after)
        if before is not None:
            params["before"] = _epoch(before)
        logger.info("Fetching activities (page %d, %d per page)...", page, per_page)
        activities = await self._get("/athlete/activities", params)
        logger.info("Fetched %d activities", len(activities))
        return activities

    async def get_activities_on(self, day: date) -> List[Dict[str, Any]]:
        """All activities that started on `day` (UTC midnight to 23:59:59)."""
        return await self.get_activities(
            page=1,
            per_page=30,
            after=datetime.combine(day, time.min),
            before=datetime.combine(day, time(23, 59, 59)),
        )
