"""
AI Router - chat assistant and analysis endpoints

Every endpoint answers 200 once its input is present, even when the AI
provider is missing or failing: the reply then carries fallback text.
Only missing input is a 400.
"""

from fastapi import APIRouter, Body, HTTPException, Request
from typing import Any
import logging

from ai_service import AIProxy
from trend_simulator import generate_test_trend_data

logger = logging.getLogger(__name__)
router = APIRouter()


def _ai(request: Request) -> AIProxy:
    return request.app.state.ai


def _body(payload: Any) -> dict:
    return payload if isinstance(payload, dict) else {}


@router.post("/ai/chat")
async def ai_chat(request: Request, payload: Any = Body(None)):
    messages = _body(payload).get("messages")
    if not isinstance(messages, list) or not all(isinstance(m, dict) for m in messages):
        raise HTTPException(status_code=400, detail="Messages array is required")

    return {"message": await _ai(request).chat(messages)}


@router.post("/ai/analyze")
async def ai_analyze(request: Request, payload: Any = Body(None)):
    text = _body(payload).get("text")
    if not text or not isinstance(text, str):
        raise HTTPException(status_code=400, detail="Text is required for analysis")

    return {"analysis": await _ai(request).analyze(text)}


@router.post("/ai/recommend")
async def ai_recommend(request: Request, payload: Any = Body(None)):
    incident = _body(payload).get("incident")
    if not incident:
        raise HTTPException(status_code=400, detail="Incident data is required")

    return {"recommendations": await _ai(request).recommend(incident)}


@router.post("/ai/analyze-trends")
async def ai_analyze_trends(request: Request, payload: Any = Body(None)):
    trend_data = _body(payload).get("trendData")
    if not trend_data:
        raise HTTPException(status_code=400, detail="Trend data is required for analysis")

    return {"analysis": await _ai(request).analyze_trends(trend_data)}


@router.get("/test/trend-data")
async def test_trend_data():
    """Simulated trend data set - works without an API key"""
    return generate_test_trend_data()
