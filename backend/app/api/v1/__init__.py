"""
API v1 Router

All API endpoints for the frontend.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import stocks, indicators, news, chat

router = APIRouter()

# Include all endpoint routers
router.include_router(stocks.router, prefix="/stocks", tags=["Stocks"])
router.include_router(indicators.router, prefix="/indicators", tags=["Indicators"])
router.include_router(news.router, prefix="/news", tags=["News & Sentiment"])
router.include_router(chat.router, prefix="/chat", tags=["AI Assistant"])
