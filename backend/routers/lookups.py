"""
Lookups router - fixed value lists for dropdowns
"""

from fastapi import APIRouter

from models import (
    SEVERITY_LEVELS, INCIDENT_TYPES, INCIDENT_STATUS, USER_ROLES, SOCIAL_PLATFORMS,
)

router = APIRouter()


@router.get("")
async def get_lookups():
    """All value lists in one call (loaded once by the frontend)"""
    return {
        "severityLevels": SEVERITY_LEVELS,
        "incidentTypes": INCIDENT_TYPES,
        "incidentStatus": INCIDENT_STATUS,
        "userRoles": USER_ROLES,
        "socialPlatforms": SOCIAL_PLATFORMS,
    }
