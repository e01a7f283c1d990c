"""
News API Endpoints

Get company news with sentiment analysis.
"""

import logging
from fastapi import APIRouter, Query

from app.api.v1.errors import to_http_exception
from app.schemas.market import NewsFeed
from app.services.base import ServiceError
from app.services.news import get_news_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/symbol/{symbol}", response_model=NewsFeed)
async def get_symbol_news(
    symbol: str,
    limit: int = Query(10, ge=1, le=50, description="Number of articles"),
):
    """
    Get news for a specific stock symbol.

    Example: `/news/symbol/AAPL`
    """
    news_service = get_news_service()

    try:
        return await news_service.get_feed(symbol, limit)
    except ServiceError as e:
        logger.error(f"Error fetching news for {symbol}: {e}")
        raise to_http_exception(e)
