"""
LLM Prompt Templates

Prompts for the AI assistant.

RULES (enforced in the system prompt):
- LLM does NO math - all numbers come from the provider or the indicator engine
- Say when data is missing instead of guessing
- Analysis, not financial advice
"""

from typing import Optional

from app.schemas.indicators import IndicatorOutput
from app.schemas.market import CompanyOverview, SecCompanyData

CHAT_SYSTEM_PROMPT = """You are a financial analysis assistant inside a stock research dashboard.

YOUR ROLE:
- Answer questions about companies, their fundamentals and their price action
- Explain what technical indicators (SMA, RSI, MACD) suggest
- Put numbers in context (sector, history, typical ranges)

RULES:
1. NEVER calculate indicators or ratios yourself. Use only the numbers in the COMPANY DATA block.
2. If a value is missing or marked N/A, say so instead of estimating it.
3. Use probabilistic language: "suggests", "is consistent with", "historically".
4. Mention the most important risks or caveats.
5. When an SEC FILINGS block is present, name the reporting period you cite and compare fiscal years where several are listed.
6. You provide analysis, not financial advice. The user makes all decisions."""

CONTEXT_TEMPLATE = """COMPANY DATA for {symbol}:

FUNDAMENTALS:
- Name: {name}
- Sector / Industry: {sector} / {industry}
- Market Cap: {market_cap}
- P/E: {pe_ratio}
- EPS: {eps}
- Dividend Yield: {dividend_yield}
- Beta: {beta}
- Profit Margin: {profit_margin}
- 52-Week Range: {week_52_low} - {week_52_high}

TECHNICALS (as of {as_of}):
- Close: {close}
- SMA 20 / 50 / 200: {sma20} / {sma50} / {sma200}
- RSI (14): {rsi}
- MACD / Signal / Histogram: {macd} / {macd_signal} / {macd_histogram}
- Volume SMA (20): {volume_sma}
- Signals: {signals}"""

SEC_TEMPLATE = """SEC FILINGS (EDGAR, CIK {cik}):
- Registrant: {name}
- Recent filings: {filings}
- Revenue (annual): {revenue}
- Net Income (annual): {net_income}
- Operating Income (annual): {operating_income}"""

CHAT_USER_PROMPT_TEMPLATE = """{context}

QUESTION:
{prompt}"""

NOT_AVAILABLE = "N/A"


def _fmt(value: Optional[float], digits: int = 2, suffix: str = "") -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:,.{digits}f}{suffix}"


def _fmt_percent(value: Optional[float]) -> str:
    # Provider ratios are fractions (0.0123 = 1.23%)
    return NOT_AVAILABLE if value is None else f"{value * 100:.2f}%"


def format_usd(value: Optional[float]) -> str:
    """Human-readable dollar amount ($1.23T, $45.60B, -$3.10M, ...)."""
    if value is None:
        return NOT_AVAILABLE
    sign = "-" if value < 0 else ""
    amount = abs(value)
    for threshold, unit in ((1e12, "T"), (1e9, "B"), (1e6, "M")):
        if amount >= threshold:
            return f"{sign}${amount / threshold:.2f}{unit}"
    return f"{sign}${amount:.2f}"


def _fmt_filings(sec_data: SecCompanyData) -> str:
    filings = []
    for f in sec_data.filings:
        period = f" for period {f.report_date}" if f.report_date else ""
        filings.append(f"{f.form} filed {f.filing_date}{period}")
    return "; ".join(filings) or NOT_AVAILABLE


def _fmt_facts(sec_data: SecCompanyData, metric: str) -> str:
    values = [f"{f.period_end}: {format_usd(f.value)}" for f in sec_data.facts_for(metric)]
    return ", ".join(values) or NOT_AVAILABLE


def build_sec_context(sec_data: SecCompanyData) -> str:
    """Filings and annual facts block, fiscal years newest first."""
    return SEC_TEMPLATE.format(
        cik=sec_data.cik,
        name=sec_data.name or NOT_AVAILABLE,
        filings=_fmt_filings(sec_data),
        revenue=_fmt_facts(sec_data, "revenue"),
        net_income=_fmt_facts(sec_data, "net_income"),
        operating_income=_fmt_facts(sec_data, "operating_income"),
    )


def build_context(
    symbol: str,
    overview: Optional[CompanyOverview],
    analysis: Optional[IndicatorOutput],
    sec_data: Optional[SecCompanyData] = None,
) -> Optional[str]:
    """Company data block for the prompt, None when nothing is known."""
    has_market_data = overview is not None or (analysis is not None and analysis.snapshot is not None)
    if not has_market_data:
        if sec_data is None:
            return None
        return f"COMPANY DATA for {symbol}:\n\n{build_sec_context(sec_data)}"

    o = overview or CompanyOverview(symbol=symbol)
    snap = analysis.snapshot if analysis else None

    def indicator(name: str, digits: int = 2) -> str:
        return _fmt(getattr(snap, name) if snap else None, digits)

    signals = ", ".join(
        f"{s.indicator}: {s.description}" for s in (analysis.signals if analysis else [])
    )

    context = CONTEXT_TEMPLATE.format(
        symbol=symbol,
        name=o.name or NOT_AVAILABLE,
        sector=o.sector or NOT_AVAILABLE,
        industry=o.industry or NOT_AVAILABLE,
        market_cap=format_usd(o.market_capitalization),
        pe_ratio=_fmt(o.pe_ratio),
        eps=_fmt(o.eps),
        dividend_yield=_fmt_percent(o.dividend_yield),
        beta=_fmt(o.beta),
        profit_margin=_fmt_percent(o.profit_margin),
        week_52_low=_fmt(o.week_52_low),
        week_52_high=_fmt(o.week_52_high),
        as_of=analysis.as_of if analysis and analysis.as_of else NOT_AVAILABLE,
        close=_fmt(analysis.close if analysis else None),
        sma20=indicator("sma20"),
        sma50=indicator("sma50"),
        sma200=indicator("sma200"),
        rsi=indicator("rsi", 1),
        macd=indicator("macd", 3),
        macd_signal=indicator("macd_signal", 3),
        macd_histogram=indicator("macd_histogram", 3),
        volume_sma=indicator("volume_sma", 0),
        signals=signals or NOT_AVAILABLE,
    )
    if sec_data is not None:
        context = f"{context}\n\n{build_sec_context(sec_data)}"
    return context


def build_user_prompt(prompt: str, context: Optional[str]) -> str:
    if context is None:
        return prompt
    return CHAT_USER_PROMPT_TEMPLATE.format(context=context, prompt=prompt)
