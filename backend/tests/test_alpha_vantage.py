import asyncio
import json
from datetime import date

import pytest

from app.schemas.market import NewsSentiment, OutputSize
from app.services.base import ExternalAPIError, RateLimitError, ValidationError
from app.services.data_ingestion.alpha_vantage import (
    AlphaVantageClient,
    classify_sentiment,
    parse_daily_series,
    parse_news_feed,
    parse_overview,
)

from conftest import FakeResponse, FakeSession


def _bar(close, volume="1000"):
    return {
        "1. open": str(close - 1),
        "2. high": str(close + 1),
        "3. low": str(close - 2),
        "4. close": str(close),
        "5. volume": volume,
    }


DAILY_PAYLOAD = {
    "Meta Data": {"2. Symbol": "IBM"},
    "Time Series (Daily)": {
        "2024-01-04": _bar(103.0),
        "2024-01-03": _bar(102.0),
        "2024-01-02": _bar(101.0, "2500"),
    },
}


# =============================================================================
# DAILY SERIES
# =============================================================================


def test_parse_daily_series_is_oldest_first():
    series = parse_daily_series(DAILY_PAYLOAD, "IBM")

    assert series.symbol == "IBM"
    assert series.dates == [date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 4)]
    assert series.closes == [101.0, 102.0, 103.0]
    assert series.bars[0].volume == 2500
    assert series.bars[0].open == 100.0


def test_parse_adjusted_layout():
    payload = {
        "Time Series (Daily)": {
            "2024-01-02": {
                "1. open": "10", "2. high": "12", "3. low": "9", "4. close": "11",
                "5. adjusted close": "10.5", "6. volume": "300",
            },
        },
    }
    bar = parse_daily_series(payload, "IBM").bars[0]

    assert bar.adjusted_close == 10.5
    assert bar.volume == 300


def test_parse_empty_daily_series():
    series = parse_daily_series({"Time Series (Daily)": {}}, "NEWCO")
    assert len(series) == 0


def test_error_message_is_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        parse_daily_series({"Error Message": "Invalid API call."}, "XXXX")
    assert exc_info.value.details["provider_message"] == "Invalid API call."


@pytest.mark.parametrize("key", ["Note", "Information"])
def test_throttle_notice_is_rate_limit_error(key):
    with pytest.raises(RateLimitError):
        parse_daily_series({key: "Thank you for using Alpha Vantage!"}, "IBM")


def test_missing_series_key_is_external_error():
    with pytest.raises(ExternalAPIError):
        parse_daily_series({"Meta Data": {}}, "IBM")


def test_malformed_bar_is_external_error():
    payload = {"Time Series (Daily)": {"2024-01-02": _bar(101.0, "lots")}}
    with pytest.raises(ExternalAPIError):
        parse_daily_series(payload, "IBM")


def test_non_object_payload_is_external_error():
    with pytest.raises(ExternalAPIError):
        parse_daily_series(["not", "a", "dict"], "IBM")


# =============================================================================
# OVERVIEW
# =============================================================================


def test_parse_overview():
    overview = parse_overview({
        "Symbol": "IBM",
        "Name": "International Business Machines",
        "MarketCapitalization": "170000000000",
        "PERatio": "22.5",
        "ProfitMargin": "None",
        "EVToEBITDA": "-",
        "52WeekHigh": "199.18",
        "Sector": "",
    }, "IBM")

    assert overview.symbol == "IBM"
    assert overview.market_capitalization == 170_000_000_000
    assert overview.pe_ratio == 22.5
    assert overview.profit_margin is None
    assert overview.ev_to_ebitda is None
    assert overview.week_52_high == 199.18
    assert overview.sector is None


def test_empty_overview_is_unknown_symbol():
    with pytest.raises(ValidationError):
        parse_overview({}, "XXXX")


# =============================================================================
# NEWS
# =============================================================================


def _article(title, **extra):
    item = {
        "title": title,
        "url": f"https://example.com/{title.replace(' ', '-')}",
        "time_published": "20240125T103000",
        "authors": ["Jane Doe"],
        "summary": "",
        "source": "Example Wire",
    }
    item.update(extra)
    return item


def test_parse_news_prefers_ticker_score():
    payload = {"feed": [_article(
        "IBM and peers",
        overall_sentiment_score=-0.5,
        ticker_sentiment=[
            {"ticker": "MSFT", "ticker_sentiment_score": "-0.6", "relevance_score": "0.2"},
            {"ticker": "IBM", "ticker_sentiment_score": "0.4", "relevance_score": "0.9"},
        ],
    )]}
    item = parse_news_feed(payload, "IBM")[0]

    assert item.sentiment_score == 0.4
    assert item.sentiment == NewsSentiment.VERY_BULLISH
    assert item.relevance_score == 0.9
    assert item.published_at.hour == 10
    assert item.authors == ["Jane Doe"]
    assert item.summary is None


def test_parse_news_falls_back_to_overall_score():
    payload = {"feed": [_article("Market wrap", overall_sentiment_score=-0.2)]}
    item = parse_news_feed(payload, "IBM")[0]

    assert item.sentiment_score == -0.2
    assert item.sentiment == NewsSentiment.BEARISH
    assert item.relevance_score is None


def test_parse_news_scores_unscored_items_from_text():
    payload = {"feed": [_article("Shares surge")]}

    scored = parse_news_feed(payload, "IBM", text_scorer=lambda text: 0.5 if "surge" in text else 0)
    assert scored[0].sentiment_score == 0.5

    neutral = parse_news_feed(payload, "IBM")
    assert neutral[0].sentiment_score == 0.0
    assert neutral[0].sentiment == NewsSentiment.NEUTRAL


def test_parse_news_skips_malformed_items_and_honours_limit():
    payload = {"feed": [
        {"title": "no url or time"},
        _article("first", overall_sentiment_score=0.1),
        _article("second", overall_sentiment_score=0.1),
        _article("third", overall_sentiment_score=0.1),
    ]}
    items = parse_news_feed(payload, "IBM", limit=2)

    assert [i.title for i in items] == ["first", "second"]


def test_parse_news_clamps_scores():
    payload = {"feed": [_article("x", overall_sentiment_score=3.0)]}
    assert parse_news_feed(payload, "IBM")[0].sentiment_score == 1.0


@pytest.mark.parametrize("score,expected", [
    (-0.5, NewsSentiment.VERY_BEARISH),
    (-0.35, NewsSentiment.VERY_BEARISH),
    (-0.2, NewsSentiment.BEARISH),
    (-0.15, NewsSentiment.BEARISH),
    (0.0, NewsSentiment.NEUTRAL),
    (0.15, NewsSentiment.BULLISH),
    (0.35, NewsSentiment.VERY_BULLISH),
])
def test_classify_sentiment(score, expected):
    assert classify_sentiment(score) == expected


# =============================================================================
# CLIENT
# =============================================================================


def test_client_without_key_raises_before_any_request():
    client = AlphaVantageClient(api_key="")

    assert not client.is_configured
    with pytest.raises(ExternalAPIError):
        asyncio.run(client.get_daily_series("IBM"))
    assert client._session is None


def _client_with(outcome):
    client = AlphaVantageClient(api_key="demo", base_url="https://av.test/query")
    client._session = FakeSession({"https://av.test/query": outcome})
    return client


def test_client_fetches_and_parses_daily_series():
    client = _client_with(FakeResponse(payload=DAILY_PAYLOAD))

    series = asyncio.run(client.get_daily_series(" ibm ", OutputSize.FULL))

    assert series.closes == [101.0, 102.0, 103.0]
    _, params = client._session.requested[0]
    assert params["function"] == "TIME_SERIES_DAILY"
    assert params["symbol"] == "IBM"
    assert params["outputsize"] == "full"


@pytest.mark.parametrize("outcome", [
    asyncio.TimeoutError(),
    FakeResponse(error=json.JSONDecodeError("Expecting value", "<html>", 0)),
    FakeResponse(status=503),
])
def test_transport_failures_are_external_errors(outcome):
    client = _client_with(outcome)

    with pytest.raises(ExternalAPIError):
        asyncio.run(client.get_daily_series("IBM"))
