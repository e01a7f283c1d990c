"""
SEC EDGAR Data Adapter

Resolves a ticker to its CIK and fetches the company's recent filings and
annual XBRL facts (revenue, net income, operating income). Used as context
for the AI assistant.

EDGAR requires a descriptive User-Agent with contact details on every request
and answers 403 without one.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Optional

import aiohttp

from app.core.config import settings
from app.schemas.market import FinancialFact, SecCompanyData, SecFiling
from app.services.base import ExternalAPIError, RateLimitError, ServiceError, ValidationError

logger = logging.getLogger(__name__)

SERVICE_NAME = "SecEdgar"

TICKERS_URL = "https://www.sec.gov/files/company_tickers.json"
SUBMISSIONS_URL = "https://data.sec.gov/submissions/CIK{cik}.json"
COMPANY_FACTS_URL = "https://data.sec.gov/api/xbrl/companyfacts/CIK{cik}.json"

# Metric → us-gaap concepts, first one present wins
FACT_CONCEPTS = {
    "revenue": (
        "Revenues",
        "RevenueFromContractWithCustomerExcludingAssessedTax",
        "Revenue",
    ),
    "net_income": ("NetIncomeLoss",),
    "operating_income": ("OperatingIncomeLoss",),
}

ANNUAL_FORMS = ("10-K", "10-K/A")
ANNUAL_DAYS = range(350, 381)


def pad_cik(cik: Any) -> str:
    return str(int(cik)).zfill(10)


def build_cik_map(payload: dict) -> dict[str, str]:
    """Ticker → zero-padded CIK from company_tickers.json."""
    ciks = {}
    for entry in payload.values():
        try:
            ciks[entry["ticker"].upper()] = pad_cik(entry["cik_str"])
        except (AttributeError, KeyError, TypeError, ValueError):
            continue
    return ciks


# =============================================================================
# PARSERS
# =============================================================================


def _optional_date(raw: Optional[str]) -> Optional[date]:
    return date.fromisoformat(raw) if raw else None


def parse_recent_filings(payload: dict, limit: int = 5) -> list[SecFiling]:
    """
    Most recent filings from a submissions payload.

    `filings.recent` is columnar: one list per field, newest first.
    """
    recent = (payload.get("filings") or {}).get("recent") or {}
    columns = (
        recent.get("form") or [],
        recent.get("filingDate") or [],
        recent.get("reportDate") or [],
        recent.get("accessionNumber") or [],
        recent.get("primaryDocument") or [],
    )

    filings = []
    for form, filed, reported, accession, document in zip(*columns):
        try:
            filings.append(SecFiling(
                form=form,
                filing_date=date.fromisoformat(filed),
                report_date=_optional_date(reported),
                accession_number=accession,
                primary_document=document or None,
            ))
        except (TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed filing {accession}: {e}")
            continue
        if len(filings) >= limit:
            break
    return filings


def _annual_values(entries: list[dict]) -> dict[date, dict]:
    """10-K values covering a full fiscal year, keyed by period end (latest filing wins)."""
    by_end: dict[date, dict] = {}
    for entry in entries:
        if entry.get("form") not in ANNUAL_FORMS:
            continue
        try:
            end = date.fromisoformat(entry["end"])
            start = _optional_date(entry.get("start"))
            float(entry["val"])
        except (KeyError, TypeError, ValueError):
            continue
        if start is not None and (end - start).days not in ANNUAL_DAYS:
            continue

        current = by_end.get(end)
        if current is None or (entry.get("filed") or "") >= (current.get("filed") or ""):
            by_end[end] = entry
    return by_end


def parse_financial_facts(payload: dict, years: int = 3) -> list[FinancialFact]:
    """Last `years` annual values of each metric in FACT_CONCEPTS, newest first."""
    gaap = (payload.get("facts") or {}).get("us-gaap") or {}

    facts = []
    for metric, concepts in FACT_CONCEPTS.items():
        for concept in concepts:
            entries = ((gaap.get(concept) or {}).get("units") or {}).get("USD") or []
            annual = _annual_values(entries)
            if not annual:
                continue

            for end in sorted(annual, reverse=True)[:years]:
                entry = annual[end]
                facts.append(FinancialFact(
                    metric=metric,
                    concept=concept,
                    period_end=end,
                    value=float(entry["val"]),
                    fiscal_year=entry.get("fy"),
                    filed=_optional_date(entry.get("filed")),
                ))
            break

    return facts


# =============================================================================
# CLIENT
# =============================================================================


class SecEdgarClient:
    """Async client for the EDGAR JSON APIs."""

    def __init__(self, user_agent: Optional[str] = None, timeout: Optional[float] = None):
        self.user_agent = user_agent or settings.sec_user_agent
        self.timeout = timeout or settings.http_timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None
        self._ciks: Optional[dict[str, str]] = None

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/json"}

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get_json(self, url: str) -> dict:
        session = await self._ensure_session()
        try:
            async with session.get(url) as response:
                if response.status == 404:
                    raise ValidationError(SERVICE_NAME, f"Not found: {url}")
                if response.status == 429:
                    raise RateLimitError(SERVICE_NAME, "EDGAR request rate exceeded")
                if response.status != 200:
                    raise ExternalAPIError(
                        SERVICE_NAME,
                        f"{url} returned HTTP {response.status}",
                        {"status": response.status},
                    )
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"EDGAR request failed for {url}: {e!r}")
            raise ExternalAPIError(SERVICE_NAME, f"Request failed: {e!r}") from e

        if not isinstance(payload, dict):
            raise ExternalAPIError(SERVICE_NAME, f"Unexpected payload from {url}")
        return payload

    async def get_cik(self, symbol: str) -> Optional[str]:
        """Zero-padded CIK for a ticker; the ticker list is loaded once."""
        if self._ciks is None:
            self._ciks = build_cik_map(await self._get_json(TICKERS_URL))
            logger.info(f"Loaded {len(self._ciks)} EDGAR tickers")
        return self._ciks.get(symbol.upper().strip())

    async def get_company_data(
        self,
        symbol: str,
        filings_limit: Optional[int] = None,
        fact_years: Optional[int] = None,
    ) -> SecCompanyData:
        """
        Recent filings and annual facts for a ticker.

        Companies without XBRL facts still return their filings.
        """
        symbol = symbol.upper().strip()
        cik = await self.get_cik(symbol)
        if cik is None:
            raise ValidationError(SERVICE_NAME, f"No SEC registrant for {symbol}")

        submissions, company_facts = await asyncio.gather(
            self._get_json(SUBMISSIONS_URL.format(cik=cik)),
            self._get_json(COMPANY_FACTS_URL.format(cik=cik)),
            return_exceptions=True,
        )
        if isinstance(submissions, BaseException):
            raise submissions
        if isinstance(company_facts, ServiceError):
            logger.warning(f"No XBRL facts for {symbol} (CIK {cik}): {company_facts}")
            company_facts = {}
        elif isinstance(company_facts, BaseException):
            raise company_facts

        return SecCompanyData(
            symbol=symbol,
            cik=cik,
            name=submissions.get("name"),
            filings=parse_recent_filings(submissions, filings_limit or settings.sec_filings_limit),
            facts=parse_financial_facts(company_facts, fact_years or settings.sec_fact_years),
        )


# Singleton instance
_client_instance: Optional[SecEdgarClient] = None


def get_sec_edgar_client() -> SecEdgarClient:
    """Get or create the EDGAR client."""
    global _client_instance
    if _client_instance is None:
        _client_instance = SecEdgarClient()
    return _client_instance
