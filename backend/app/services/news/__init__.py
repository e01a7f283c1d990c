"""
News Integration Service

Fetches company news with sentiment and summarizes it.
"""

from app.services.news.service import (
    NewsService,
    get_news_service,
    keyword_score,
    summarize,
)

__all__ = [
    "NewsService",
    "get_news_service",
    "keyword_score",
    "summarize",
]
