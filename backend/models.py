"""
Entity records for EWERS

One pydantic model per entity kind held by the in-memory store.
Attributes are snake_case in Python and camelCase on the wire
(alias_generator), so a record dumps straight to the JSON the UI expects.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime


# =============================================================================
# CONSTANTS
# =============================================================================

SEVERITY_LEVELS = ['critical', 'high', 'medium', 'low']
INCIDENT_TYPES = [
    'banditry',
    'militancy',
    'secession',
    'farmer-herder',
    'political',
    'boundary',
    'communal',
    'other',
]
INCIDENT_STATUS = ['active', 'investigating', 'resolved', 'closed']
USER_ROLES = ['admin', 'user', 'analyst', 'responder', 'call_agent']
SOCIAL_PLATFORMS = ['twitter', 'facebook', 'instagram', 'tiktok', 'whatsapp', 'other']


class Record(BaseModel):
    """Base for stored records and their nested structures"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict:
        """JSON-ready dict with camelCase keys (used for HTTP and WebSocket)"""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# NESTED STRUCTURES
# =============================================================================

class Coordinates(Record):
    lat: float
    lng: float


class PlanStep(Record):
    order: int
    title: str
    description: str


class ContactAgency(Record):
    name: str
    contact: str
    role: str


class PlanResource(Record):
    type: str
    quantity: int
    description: str


# =============================================================================
# ENTITY RECORDS
# =============================================================================

class User(Record):
    id: int
    username: str
    password: str                           # Plaintext, compared as-is on login
    full_name: str
    email: str
    role: str = 'user'
    agency: Optional[str] = None
    created_at: datetime

    def public_dict(self) -> dict:
        """User without the credential field"""
        data = self.to_dict()
        data.pop('password', None)
        return data


class Incident(Record):
    id: int
    title: str
    description: str
    location: str
    coordinates: Coordinates
    incident_type: str
    severity: str
    status: str = 'active'
    reported_by: int
    reported_at: datetime
    verified_by: Optional[int] = None
    verified_at: Optional[datetime] = None
    affected_population: Optional[int] = None
    media_links: Optional[List[str]] = Field(default_factory=list)
    tags: Optional[List[str]] = Field(default_factory=list)


class CallLog(Record):
    id: int
    caller_name: str
    contact_number: str
    location: str
    incident_type: str
    severity: str
    description: str
    immediate_actions: Optional[List[str]] = Field(default_factory=list)
    logged_by: int
    logged_at: datetime
    status: str = 'pending'
    related_incident_id: Optional[int] = None


class Alert(Record):
    id: int
    title: str
    description: str
    alert_type: str
    severity: str
    source: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    status: str = 'active'
    related_incident_id: Optional[int] = None
    sent_to: Optional[List[int]] = Field(default_factory=list)


class SocialTrend(Record):
    id: int
    platform: str
    keyword: str
    volume: int
    sentiment: Optional[float] = None       # -1 to 1, advisory only
    location: Optional[str] = None
    source: str
    created_at: datetime
    related_incident_types: Optional[List[str]] = Field(default_factory=list)


class ResponsePlan(Record):
    id: int
    title: str
    description: str
    incident_type: str
    severity: str
    steps: List[PlanStep]
    contact_agencies: List[ContactAgency]
    resources: Optional[List[PlanResource]] = Field(default_factory=list)
    created_by: int
    created_at: datetime
    updated_at: datetime
