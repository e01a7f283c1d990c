import asyncio
from datetime import date

import pytest

from app.core.config import settings
from app.services.base import ExternalAPIError, RateLimitError, ValidationError
from app.services.data_ingestion.sec_edgar import (
    COMPANY_FACTS_URL,
    SUBMISSIONS_URL,
    TICKERS_URL,
    SecEdgarClient,
    build_cik_map,
    pad_cik,
    parse_financial_facts,
    parse_recent_filings,
)

from conftest import FakeResponse, FakeSession

IBM_CIK = "0000051143"

TICKERS_PAYLOAD = {
    "0": {"cik_str": 51143, "ticker": "IBM", "title": "INTERNATIONAL BUSINESS MACHINES CORP"},
    "1": {"cik_str": 320193, "ticker": "aapl", "title": "Apple Inc."},
    "2": {"ticker": "NOCIK"},
    "3": {"cik_str": "n/a", "ticker": "BAD"},
}

SUBMISSIONS_PAYLOAD = {
    "cik": "51143",
    "name": "INTERNATIONAL BUSINESS MACHINES CORP",
    "filings": {"recent": {
        "form": ["10-K", "8-K", "4", "10-Q"],
        "filingDate": ["2024-02-26", "2024-01-24", "someday", "2023-10-30"],
        "reportDate": ["2023-12-31", "", "", "2023-09-30"],
        "accessionNumber": [
            "0000051143-24-000012",
            "0000051143-24-000005",
            "0000051143-23-000099",
            "0000051143-23-000071",
        ],
        "primaryDocument": ["ibm-20231231.htm", "", "xslF345X05/form4.xml", "ibm-20230930.htm"],
    }},
}


def _fact(start, end, val, form="10-K", filed="2024-02-26", fy=None):
    entry = {"end": end, "val": val, "form": form, "filed": filed, "fy": fy}
    if start is not None:
        entry["start"] = start
    return entry


FACTS_PAYLOAD = {"facts": {"us-gaap": {
    "Revenues": {"units": {"USD": [
        _fact("2021-01-01", "2021-12-31", 57_350_000_000, filed="2022-03-01", fy=2021),
        _fact("2022-01-01", "2022-12-31", 60_530_000_000, filed="2023-02-28", fy=2022),
        _fact("2023-01-01", "2023-12-31", 61_000_000_000, filed="2024-02-20", fy=2023),
        _fact("2023-01-01", "2023-12-31", 61_860_000_000, filed="2024-02-26", fy=2023),
        _fact("2023-10-01", "2023-12-31", 17_380_000_000, fy=2023),
        _fact("2023-07-01", "2023-09-30", 14_750_000_000, form="10-Q", filed="2023-10-30"),
        _fact("2020-01-01", "2020-12-31", "n/a", filed="2021-02-23"),
    ]}},
    "NetIncomeLoss": {"units": {"USD": [
        _fact("2023-01-01", "2023-12-31", 7_502_000_000, fy=2023),
    ]}},
    "OperatingIncomeLoss": {"units": {"EUR": [
        _fact("2023-01-01", "2023-12-31", 9_000_000_000, fy=2023),
    ]}},
}}}


# =============================================================================
# PARSERS
# =============================================================================


def test_pad_cik():
    assert pad_cik(51143) == IBM_CIK
    assert pad_cik("0000320193") == "0000320193"


def test_build_cik_map_skips_malformed_entries():
    assert build_cik_map(TICKERS_PAYLOAD) == {"IBM": IBM_CIK, "AAPL": "0000320193"}


def test_parse_recent_filings_reads_columns_in_order():
    filings = parse_recent_filings(SUBMISSIONS_PAYLOAD)

    assert [f.form for f in filings] == ["10-K", "8-K", "10-Q"]
    assert filings[0].filing_date == date(2024, 2, 26)
    assert filings[0].report_date == date(2023, 12, 31)
    assert filings[0].primary_document == "ibm-20231231.htm"
    assert filings[1].report_date is None
    assert filings[1].primary_document is None


def test_parse_recent_filings_honours_limit():
    filings = parse_recent_filings(SUBMISSIONS_PAYLOAD, limit=1)
    assert [f.accession_number for f in filings] == ["0000051143-24-000012"]


def test_parse_recent_filings_without_filings():
    assert parse_recent_filings({"name": "NEWCO"}) == []


def test_parse_financial_facts_keeps_latest_annual_values():
    facts = parse_financial_facts(FACTS_PAYLOAD, years=2)
    revenue = [f for f in facts if f.metric == "revenue"]

    assert [f.period_end for f in revenue] == [date(2023, 12, 31), date(2022, 12, 31)]
    assert revenue[0].value == 61_860_000_000
    assert revenue[0].filed == date(2024, 2, 26)
    assert revenue[0].fiscal_year == 2023
    assert revenue[0].concept == "Revenues"


def test_parse_financial_facts_skips_metrics_without_usd_values():
    metrics = {f.metric for f in parse_financial_facts(FACTS_PAYLOAD)}
    assert metrics == {"revenue", "net_income"}


def test_parse_financial_facts_falls_back_to_next_concept():
    payload = {"facts": {"us-gaap": {
        "Revenues": {"units": {"USD": [
            _fact("2023-07-01", "2023-09-30", 14_750_000_000, form="10-Q"),
        ]}},
        "RevenueFromContractWithCustomerExcludingAssessedTax": {"units": {"USD": [
            _fact("2022-10-01", "2023-09-30", 383_285_000_000, fy=2023),
        ]}},
    }}}

    revenue = parse_financial_facts(payload)

    assert len(revenue) == 1
    assert revenue[0].concept == "RevenueFromContractWithCustomerExcludingAssessedTax"
    assert revenue[0].period_end == date(2023, 9, 30)


def test_parse_financial_facts_without_facts():
    assert parse_financial_facts({}) == []


# =============================================================================
# CLIENT
# =============================================================================


def _client_with(tickers=None, submissions=None, facts=None):
    routes = {
        TICKERS_URL: tickers or FakeResponse(payload=TICKERS_PAYLOAD),
        SUBMISSIONS_URL.format(cik=IBM_CIK): submissions or FakeResponse(payload=SUBMISSIONS_PAYLOAD),
        COMPANY_FACTS_URL.format(cik=IBM_CIK): facts or FakeResponse(payload=FACTS_PAYLOAD),
    }
    client = SecEdgarClient(user_agent="StockSight tests ops@example.com")
    client._session = FakeSession(routes)
    return client


def test_client_sends_contact_user_agent():
    assert SecEdgarClient(user_agent="Acme Research ops@acme.test").headers["User-Agent"] == (
        "Acme Research ops@acme.test"
    )
    assert SecEdgarClient().headers["User-Agent"] == settings.sec_user_agent


def test_get_company_data():
    client = _client_with()

    data = asyncio.run(client.get_company_data(" ibm ", filings_limit=2, fact_years=3))

    assert data.symbol == "IBM"
    assert data.cik == IBM_CIK
    assert data.name == "INTERNATIONAL BUSINESS MACHINES CORP"
    assert [f.form for f in data.filings] == ["10-K", "8-K"]
    assert [f.value for f in data.facts_for("revenue")] == [
        61_860_000_000, 60_530_000_000, 57_350_000_000,
    ]
    assert data.facts_for("operating_income") == []


def test_ticker_map_is_loaded_once():
    client = _client_with()

    async def scenario():
        await client.get_cik("IBM")
        await client.get_cik("AAPL")
        return await client.get_cik("MSFT")

    assert asyncio.run(scenario()) is None
    assert [url for url, _ in client._session.requested] == [TICKERS_URL]


def test_unknown_ticker_is_validation_error():
    client = _client_with()

    with pytest.raises(ValidationError):
        asyncio.run(client.get_company_data("ZZZZ"))


def test_missing_facts_still_return_filings():
    client = _client_with(facts=FakeResponse(status=404))

    data = asyncio.run(client.get_company_data("IBM"))

    assert len(data.filings) == 3
    assert data.facts == []


def test_submissions_failure_propagates():
    client = _client_with(submissions=FakeResponse(status=429))

    with pytest.raises(RateLimitError):
        asyncio.run(client.get_company_data("IBM"))


@pytest.mark.parametrize("outcome", [
    asyncio.TimeoutError(),
    FakeResponse(status=403),
    FakeResponse(error=ValueError("Expecting value")),
    FakeResponse(payload=["not", "an", "object"]),
])
def test_ticker_lookup_failures_are_external_errors(outcome):
    client = _client_with(tickers=outcome)

    with pytest.raises(ExternalAPIError):
        asyncio.run(client.get_company_data("IBM"))
