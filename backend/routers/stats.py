"""
Stats Router - dashboard summary counters

Recomputed from the store on every call, no caching.
"""

from fastapi import APIRouter, Depends, HTTPException
from datetime import date
import logging

from storage import MemStorage, get_store

logger = logging.getLogger(__name__)
router = APIRouter()


def calculate_stats(store: MemStorage, today: date = None) -> dict:
    """
    Summary counters for the dashboard cards.

    newReportsToday compares reportedAt in the server's local timezone
    against today's local date. socialMediaAlerts counts every social
    trend record.
    """
    today = today or date.today()
    incidents = store.incidents.list()

    return {
        "activeIncidents": sum(1 for i in incidents if i.status == "active"),
        "newReportsToday": sum(1 for i in incidents if i.reported_at.astimezone().date() == today),
        "socialMediaAlerts": len(store.social_trends.list()),
        "resolvedIncidents": sum(1 for i in incidents if i.status == "resolved"),
    }


@router.get("")
async def get_stats(store: MemStorage = Depends(get_store)):
    try:
        return calculate_stats(store)
    except Exception as e:
        logger.exception(f"Failed to fetch stats: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch stats")
