"""
News Service

Fetches company news with sentiment from the market data provider and
summarizes it. Articles the provider did not score are scored by keyword
matching.
"""

import logging
from typing import Optional, List

from app.schemas.market import NewsFeed, NewsItem, NewsSentiment, NewsSentimentSummary
from app.services.data_ingestion import DataIngestionService, get_data_ingestion_service
from app.services.data_ingestion.alpha_vantage import classify_sentiment

logger = logging.getLogger(__name__)

BULLISH_SENTIMENTS = (NewsSentiment.BULLISH, NewsSentiment.VERY_BULLISH)
BEARISH_SENTIMENTS = (NewsSentiment.BEARISH, NewsSentiment.VERY_BEARISH)

# Keywords for sentiment analysis
BULLISH_KEYWORDS = [
    "surge", "surges", "surging", "soar", "soars", "soaring",
    "rally", "rallies", "rallying", "gain", "gains", "gaining",
    "rise", "rises", "rising", "jump", "jumps", "jumping",
    "breakout", "breakthrough", "upgrade", "upgrades", "upgraded",
    "outperform", "bullish", "positive", "strong",
    "growth", "profit", "profits", "profitable", "beat", "beats",
    "record", "all-time", "boom", "booming",
    "expand", "expansion", "exceeds", "exceeded", "optimistic",
]

BEARISH_KEYWORDS = [
    "fall", "falls", "falling", "drop", "drops", "dropping",
    "decline", "declines", "declining", "crash", "crashes", "crashing",
    "plunge", "plunges", "plunging", "sink", "sinks", "sinking",
    "selloff", "downgrade", "downgrades",
    "underperform", "bearish", "negative", "weak", "weakness",
    "loss", "losses", "losing", "miss", "misses", "missed",
    "slump", "slumps", "warning", "warns",
    "concern", "concerns", "worried", "fear", "fears",
    "layoff", "layoffs", "shutdown", "lawsuit", "probe",
]


def keyword_score(text: str) -> float:
    """
    Score text from -1 (bearish) to 1 (bullish) by keyword counts.

    Whole words only, so "again" does not count as "gain".
    """
    words = set(text.lower().replace(",", " ").replace(".", " ").split())

    bullish_count = sum(1 for kw in BULLISH_KEYWORDS if kw in words)
    bearish_count = sum(1 for kw in BEARISH_KEYWORDS if kw in words)

    total = bullish_count + bearish_count
    if total == 0:
        return 0.0

    return round((bullish_count - bearish_count) / total, 2)


def summarize(articles: List[NewsItem]) -> NewsSentimentSummary:
    """Counts per sentiment side and the mean score."""
    if not articles:
        return NewsSentimentSummary(
            bullish_count=0, bearish_count=0, neutral_count=0, avg_score=0.0
        )

    bullish = sum(1 for a in articles if a.sentiment in BULLISH_SENTIMENTS)
    bearish = sum(1 for a in articles if a.sentiment in BEARISH_SENTIMENTS)
    avg_score = sum(a.sentiment_score for a in articles) / len(articles)

    return NewsSentimentSummary(
        bullish_count=bullish,
        bearish_count=bearish,
        neutral_count=len(articles) - bullish - bearish,
        avg_score=round(avg_score, 4),
        overall=classify_sentiment(avg_score),
    )


class NewsService:
    """Service for fetching and summarizing company news."""

    def __init__(self, data_service: Optional[DataIngestionService] = None):
        self._data_service = data_service

    @property
    def data_service(self) -> DataIngestionService:
        return self._data_service or get_data_ingestion_service()

    async def get_symbol_news(self, symbol: str, limit: int = 10) -> List[NewsItem]:
        """Get news for a specific stock symbol."""
        symbol = symbol.upper().strip()
        articles = await self.data_service.get_news(symbol, limit, text_scorer=keyword_score)
        logger.info(f"Fetched {len(articles)} news items for {symbol}")
        return articles

    async def get_feed(self, symbol: str, limit: int = 10) -> NewsFeed:
        """News for a symbol with its sentiment summary."""
        symbol = symbol.upper().strip()
        articles = await self.get_symbol_news(symbol, limit)
        return NewsFeed(
            symbol=symbol,
            count=len(articles),
            sentiment_summary=summarize(articles),
            articles=articles,
        )


# Singleton instance
_news_service: Optional[NewsService] = None


def get_news_service() -> NewsService:
    """Get the news service singleton."""
    global _news_service
    if _news_service is None:
        _news_service = NewsService()
    return _news_service
