from datetime import date, timedelta

import pytest

from app.schemas.market import (
    CompanyOverview,
    FinancialFact,
    NewsItem,
    NewsSentiment,
    PriceBar,
    PriceSeries,
    SecCompanyData,
    SecFiling,
)
from app.services.base import ServiceError


def build_series(closes, volumes=None, symbol="TEST", start=date(2024, 1, 1)):
    """Ascending daily series with one bar per close."""
    volumes = volumes or [1_000] * len(closes)
    bars = [
        PriceBar(
            date=start + timedelta(days=i),
            open=close,
            high=close + 1,
            low=max(close - 1, 0.01),
            close=close,
            volume=volume,
        )
        for i, (close, volume) in enumerate(zip(closes, volumes))
    ]
    return PriceSeries(symbol=symbol, bars=bars)


class FakeDataService:
    """Stands in for DataIngestionService; raises `error` when set."""

    def __init__(self, series=None, overview=None, news=None, sec_data=None, error=None):
        self.series = series if series is not None else PriceSeries(symbol="TEST")
        self.overview = overview
        self.sec_data = sec_data
        self.news = news or []
        self.error = error
        self.calls = []

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    async def get_price_series(self, symbol, use_cache=True):
        self.calls.append(("series", symbol, use_cache))
        self._maybe_fail()
        return self.series

    async def get_overview(self, symbol):
        self.calls.append(("overview", symbol))
        self._maybe_fail()
        if self.overview is None:
            raise ServiceError("Fake", f"No overview for {symbol}")
        return self.overview

    async def get_news(self, symbol, limit=10, text_scorer=None):
        self.calls.append(("news", symbol, limit))
        self._maybe_fail()
        return self.news[:limit]

    async def get_sec_data(self, symbol):
        self.calls.append(("sec", symbol))
        self._maybe_fail()
        if self.sec_data is None:
            raise ServiceError("Fake", f"No SEC data for {symbol}")
        return self.sec_data


class FakeResponse:
    def __init__(self, status=200, payload=None, error=None):
        self.status = status
        self.payload = payload
        self.error = error

    async def json(self, content_type="application/json"):
        if self.error is not None:
            raise self.error
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """aiohttp.ClientSession stand-in; `routes` maps URL to a FakeResponse or an exception."""

    closed = False

    def __init__(self, routes):
        self.routes = routes
        self.requested = []

    def get(self, url, params=None):
        self.requested.append((url, params))
        outcome = self.routes[url]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self):
        self.closed = True


@pytest.fixture
def make_series():
    return build_series


@pytest.fixture
def ibm_overview():
    return CompanyOverview.model_validate({
        "Symbol": "IBM",
        "Name": "International Business Machines",
        "Sector": "TECHNOLOGY",
        "Industry": "COMPUTER & OFFICE EQUIPMENT",
        "MarketCapitalization": "170000000000",
        "PERatio": "22.5",
        "EPS": "8.14",
        "DividendYield": "0.0365",
        "Beta": "0.71",
        "ProfitMargin": "None",
        "52WeekHigh": "199.18",
        "52WeekLow": "130.68",
    })


@pytest.fixture
def news_items():
    return [
        NewsItem(
            title="IBM beats earnings estimates",
            url="https://example.com/1",
            published_at="2024-01-25T10:00:00",
            source="Example Wire",
            sentiment_score=0.4,
            sentiment=NewsSentiment.VERY_BULLISH,
        ),
        NewsItem(
            title="IBM shares slip on guidance",
            url="https://example.com/2",
            published_at="2024-01-26T10:00:00",
            source="Example Wire",
            sentiment_score=-0.2,
            sentiment=NewsSentiment.BEARISH,
        ),
        NewsItem(
            title="IBM to present at conference",
            url="https://example.com/3",
            published_at="2024-01-27T10:00:00",
            source="Example Wire",
            sentiment_score=0.0,
            sentiment=NewsSentiment.NEUTRAL,
        ),
    ]


@pytest.fixture
def ibm_sec_data():
    return SecCompanyData(
        symbol="IBM",
        cik="0000051143",
        name="INTERNATIONAL BUSINESS MACHINES CORP",
        filings=[
            SecFiling(
                form="10-K",
                filing_date="2024-02-26",
                report_date="2023-12-31",
                accession_number="0000051143-24-000012",
                primary_document="ibm-20231231.htm",
            ),
            SecFiling(form="8-K", filing_date="2024-01-24", accession_number="0000051143-24-000005"),
        ],
        facts=[
            FinancialFact(metric="revenue", concept="Revenues", period_end="2023-12-31", value=61.86e9),
            FinancialFact(metric="revenue", concept="Revenues", period_end="2022-12-31", value=60.53e9),
            FinancialFact(metric="net_income", concept="NetIncomeLoss", period_end="2023-12-31", value=7.5e9),
        ],
    )
