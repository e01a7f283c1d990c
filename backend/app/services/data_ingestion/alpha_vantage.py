"""
Alpha Vantage Data Adapter

Fetches daily prices, company fundamentals and news sentiment.

The provider returns daily bars newest-first as nested objects keyed by
labels like "1. open"; parse_daily_series flattens them into PriceBars
sorted oldest-first, which is what the indicator engine expects.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Callable, Optional

import aiohttp

from app.core.config import settings
from app.schemas.market import (
    CompanyOverview,
    NewsItem,
    NewsSentiment,
    OutputSize,
    PriceBar,
    PriceSeries,
)
from app.services.base import ExternalAPIError, RateLimitError, ValidationError

logger = logging.getLogger(__name__)

SERVICE_NAME = "AlphaVantage"

DAILY_SERIES_KEY = "Time Series (Daily)"
NEWS_TIME_FORMAT = "%Y%m%dT%H%M%S"

# Label → field for the plain and the adjusted daily layouts
BAR_FIELDS = {
    "1. open": "open",
    "2. high": "high",
    "3. low": "low",
    "4. close": "close",
    "5. volume": "volume",
    "5. adjusted close": "adjusted_close",
    "6. volume": "volume",
}


def classify_sentiment(score: float) -> NewsSentiment:
    """Map a -1..1 sentiment score onto a sentiment label."""
    if score <= -0.35:
        return NewsSentiment.VERY_BEARISH
    if score <= -0.15:
        return NewsSentiment.BEARISH
    if score < 0.15:
        return NewsSentiment.NEUTRAL
    if score < 0.35:
        return NewsSentiment.BULLISH
    return NewsSentiment.VERY_BULLISH


def check_payload(payload: Any, symbol: str) -> dict:
    """Raise the matching ServiceError for provider error payloads."""
    if not isinstance(payload, dict):
        raise ExternalAPIError(SERVICE_NAME, f"Unexpected payload for {symbol}")

    if "Error Message" in payload:
        raise ValidationError(
            SERVICE_NAME,
            f"Request rejected for {symbol}",
            {"provider_message": payload["Error Message"]},
        )

    for key in ("Note", "Information"):
        if key in payload:
            raise RateLimitError(
                SERVICE_NAME,
                "API call frequency exceeded",
                {"provider_message": payload[key]},
            )

    return payload


# =============================================================================
# PARSERS
# =============================================================================


def _parse_bar(day: str, fields: dict[str, str]) -> PriceBar:
    values = {}
    for label, raw in fields.items():
        name = BAR_FIELDS.get(label)
        if name is None:
            continue
        values[name] = int(float(raw)) if name == "volume" else float(raw)
    return PriceBar(date=date.fromisoformat(day), **values)


def parse_daily_series(payload: dict, symbol: str) -> PriceSeries:
    """
    Flatten a TIME_SERIES_DAILY payload into an ascending PriceSeries.

    Duplicate dates keep the last occurrence.
    """
    check_payload(payload, symbol)

    raw = payload.get(DAILY_SERIES_KEY)
    if raw is None:
        raise ExternalAPIError(
            SERVICE_NAME,
            f"Missing '{DAILY_SERIES_KEY}' for {symbol}",
            {"keys": sorted(payload.keys())},
        )

    try:
        by_date = {}
        for day, fields in raw.items():
            bar = _parse_bar(day, fields)
            by_date[bar.date] = bar
    except (AttributeError, TypeError, ValueError) as e:
        raise ExternalAPIError(SERVICE_NAME, f"Malformed daily bar for {symbol}: {e}")

    bars = [by_date[d] for d in sorted(by_date)]
    return PriceSeries(symbol=symbol, bars=bars)


def parse_overview(payload: dict, symbol: str) -> CompanyOverview:
    """Parse an OVERVIEW payload. An empty object means an unknown symbol."""
    check_payload(payload, symbol)

    if not payload or "Symbol" not in payload:
        raise ValidationError(SERVICE_NAME, f"No company overview for {symbol}")

    return CompanyOverview.model_validate(payload)


def _ticker_sentiment(item: dict, symbol: str) -> tuple[Optional[float], Optional[float]]:
    """(score, relevance) specific to `symbol`, if the item carries one."""
    for entry in item.get("ticker_sentiment") or []:
        if entry.get("ticker", "").upper() == symbol:
            try:
                return (
                    float(entry["ticker_sentiment_score"]),
                    float(entry["relevance_score"]),
                )
            except (KeyError, TypeError, ValueError):
                return None, None
    return None, None


def parse_news_feed(
    payload: dict,
    symbol: str,
    limit: Optional[int] = None,
    text_scorer: Optional[Callable[[str], float]] = None,
) -> list[NewsItem]:
    """
    Parse a NEWS_SENTIMENT payload.

    Items the provider did not score are scored from title and summary with
    `text_scorer`, or treated as neutral when none is given.
    """
    check_payload(payload, symbol)

    feed = payload.get("feed")
    if feed is None:
        raise ExternalAPIError(SERVICE_NAME, f"Missing 'feed' for {symbol}")

    items = []
    for raw in feed:
        try:
            published_at = datetime.strptime(raw["time_published"], NEWS_TIME_FORMAT)
            title = raw["title"]
            url = raw["url"]
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed news item for {symbol}: {e}")
            continue

        score, relevance = _ticker_sentiment(raw, symbol)
        if score is None:
            try:
                score = float(raw["overall_sentiment_score"])
            except (KeyError, TypeError, ValueError):
                text = f"{title} {raw.get('summary') or ''}"
                score = text_scorer(text) if text_scorer else 0.0

        score = max(-1.0, min(1.0, score))
        items.append(NewsItem(
            title=title,
            url=url,
            published_at=published_at,
            authors=raw.get("authors") or [],
            summary=raw.get("summary") or None,
            source=raw.get("source") or "Unknown",
            sentiment_score=score,
            sentiment=classify_sentiment(score),
            relevance_score=relevance,
        ))

        if limit is not None and len(items) >= limit:
            break

    return items


# =============================================================================
# CLIENT
# =============================================================================


class AlphaVantageClient:
    """Async client for the Alpha Vantage query API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.alpha_vantage_api_key
        self.base_url = base_url or settings.alpha_vantage_base_url
        self.timeout = timeout or settings.http_timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _query(self, function: str, **params: Any) -> dict:
        """Call one API function and return the decoded JSON body."""
        if not self.is_configured:
            raise ExternalAPIError(SERVICE_NAME, "ALPHA_VANTAGE_API_KEY is not configured")

        session = await self._ensure_session()
        query = {"function": function, "apikey": self.api_key, **params}

        try:
            async with session.get(self.base_url, params=query) as response:
                if response.status != 200:
                    raise ExternalAPIError(
                        SERVICE_NAME,
                        f"{function} returned HTTP {response.status}",
                        {"status": response.status},
                    )
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            # ValueError: body was not JSON
            logger.error(f"Alpha Vantage {function} request failed: {e!r}")
            raise ExternalAPIError(SERVICE_NAME, f"{function} request failed: {e!r}") from e

    async def get_daily_series(
        self,
        symbol: str,
        output_size: OutputSize = OutputSize.COMPACT,
    ) -> PriceSeries:
        """Daily bars for a symbol, oldest first."""
        symbol = symbol.upper().strip()
        payload = await self._query(
            "TIME_SERIES_DAILY", symbol=symbol, outputsize=OutputSize(output_size).value
        )
        series = parse_daily_series(payload, symbol)
        logger.info(f"Fetched {len(series)} daily bars for {symbol}")
        return series

    async def get_overview(self, symbol: str) -> CompanyOverview:
        """Company fundamentals."""
        symbol = symbol.upper().strip()
        payload = await self._query("OVERVIEW", symbol=symbol)
        return parse_overview(payload, symbol)

    async def get_news_sentiment(
        self,
        symbol: str,
        limit: int = 10,
        text_scorer: Optional[Callable[[str], float]] = None,
    ) -> list[NewsItem]:
        """Recent news mentioning the symbol, with sentiment scores."""
        symbol = symbol.upper().strip()
        payload = await self._query("NEWS_SENTIMENT", tickers=symbol, limit=str(max(limit, 50)))
        return parse_news_feed(payload, symbol, limit, text_scorer)


# Singleton instance
_client_instance: Optional[AlphaVantageClient] = None


def get_alpha_vantage_client() -> AlphaVantageClient:
    """Get or create the Alpha Vantage client."""
    global _client_instance
    if _client_instance is None:
        _client_instance = AlphaVantageClient()
    return _client_instance
