"""Public holiday lookups.

``NagerHolidaySource`` talks to date.nager.at and raises
``UpstreamHolidaySourceError`` on every kind of failure.
``PublicHolidayProvider`` wraps any source with a per-year cache, the static
fallback dataset and region filtering, and never raises.
"""

import asyncio
from typing import Callable, Optional

import httpx
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from pydantic import ValidationError
from services.attendance_service.calendar.cache import Clock, TTLCache
from services.attendance_service.calendar.fallbacks import get_fallback_holidays
from services.attendance_service.exceptions import UpstreamHolidaySourceError
from services.attendance_service.schemas import PublicHoliday
from services.attendance_service.stores import HolidaySource

logger = get_logger(__name__)

USER_AGENT = "Attendance-Engine/1.0"


class NagerHolidaySource:
    """HolidaySource backed by the Nager.Date public API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.HOLIDAY_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.HOLIDAY_API_TIMEOUT
        self._transport = transport

    async def _get(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            return await client.get(
                url,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            )

    async def fetch_year(self, year: int, country_code: str) -> list[PublicHoliday]:
        url = f"{self.base_url}/PublicHolidays/{year}/{country_code}"
        try:
            # httpx timeouts are per phase; wait_for bounds the whole call
            response = await asyncio.wait_for(self._get(url), self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise UpstreamHolidaySourceError(
                f"Holiday API request timed out for {url}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamHolidaySourceError(
                f"Holiday API request failed for {url}: {e}"
            ) from e

        if response.status_code >= 400:
            raise UpstreamHolidaySourceError(
                f"Holiday API responded with status {response.status_code} for {url}"
            )

        # An empty body means "no holidays published", not an error
        if not response.content.strip():
            return []

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamHolidaySourceError(
                f"Failed to parse holiday API response for {url}: {e}"
            ) from e

        if not isinstance(payload, list):
            return []

        try:
            return [PublicHoliday.model_validate(item) for item in payload]
        except ValidationError as e:
            raise UpstreamHolidaySourceError(
                f"Unexpected holiday payload for {url}: {e}"
            ) from e


class PublicHolidayProvider:
    """Cached, failure-proof public holidays for a country and year."""

    def __init__(
        self,
        source: HolidaySource,
        ttl_seconds: Optional[int] = None,
        clock: Clock = utc_now,
        fallback: Callable[[str, int], list[PublicHoliday]] = get_fallback_holidays,
    ):
        if ttl_seconds is None:
            ttl_seconds = get_settings().HOLIDAY_CACHE_TTL_SECONDS
        self.source = source
        self.fallback = fallback
        self._cache: TTLCache[tuple[str, int], list[PublicHoliday]] = TTLCache(
            ttl_seconds, clock=clock
        )

    async def get_year(self, year: int, country_code: str) -> list[PublicHoliday]:
        country_code = country_code.upper()
        return await self._cache.get_or_build(
            (country_code, year), lambda: self._load_year(year, country_code)
        )

    async def get_month(
        self,
        year: int,
        month: int,
        country_code: str,
        region_code: Optional[str] = None,
    ) -> list[PublicHoliday]:
        prefix = f"{year:04d}-{month:02d}-"
        holidays = await self.get_year(year, country_code)
        return [
            h
            for h in holidays
            if h.date.startswith(prefix) and h.applies_to_region(region_code)
        ]

    async def _load_year(self, year: int, country_code: str) -> list[PublicHoliday]:
        error: Optional[Exception] = None
        holidays: list[PublicHoliday] = []
        try:
            holidays = await self.source.fetch_year(year, country_code)
        except UpstreamHolidaySourceError as e:
            error = e
        except Exception as e:
            # Any adapter bug is treated like an upstream outage
            error = UpstreamHolidaySourceError(str(e))

        if holidays:
            return holidays

        fallback = self.fallback(country_code, year)
        if fallback:
            if error is not None:
                logger.warning(
                    f"Using fallback holiday dataset for {country_code}-{year}: {error}"
                )
            return fallback

        if error is not None:
            logger.warning(
                f"No holiday data available for {country_code}-{year}: {error}"
            )
        return []
