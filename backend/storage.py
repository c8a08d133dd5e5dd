"""
In-memory storage for EWERS

Six keyed collections (users, incidents, call logs, alerts, social trends,
response plans). Each collection owns its own id counter: ids start at 1,
only ever go up, and are never reused after a delete.

Nothing here is durable - state lives for the life of the process.
A MemStorage is built in the app lifespan and handed to routes through
request.app.state (see get_store).
"""

from datetime import datetime, timezone, timedelta
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar
import logging
import os

from fastapi import Request

from models import (
    Record, User, Incident, CallLog, Alert, SocialTrend, ResponsePlan,
)

logger = logging.getLogger(__name__)

SEED_SAMPLE_DATA = os.environ.get("EWERS_SEED_SAMPLE_DATA", "true").lower() in ("1", "true", "yes")

R = TypeVar("R", bound=Record)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class EntityCollection(Generic[R]):
    """
    Insertion-ordered map of id -> record for one entity kind.

    Args:
        model: Record class stored in this collection
        created_fields: Timestamp fields stamped once at create, never updated
        updated_field: Timestamp field refreshed on every successful update
        cleared_fields: Fields forced to None at create regardless of payload
    """

    def __init__(
        self,
        model: Type[R],
        created_fields: Tuple[str, ...] = ("created_at",),
        updated_field: Optional[str] = None,
        cleared_fields: Tuple[str, ...] = (),
    ):
        self.model = model
        self.created_fields = created_fields
        self.updated_field = updated_field
        self.cleared_fields = cleared_fields
        self._records: Dict[int, R] = {}
        self._current_id = 1

    def __len__(self) -> int:
        return len(self._records)

    def get(self, id: int) -> Optional[R]:
        return self._records.get(id)

    def list(self, limit: Optional[int] = None) -> List[R]:
        """
        Records in creation order.

        A limit returns the first `limit` records (oldest first), not the
        most recent ones. 0/None means no limit.
        """
        records = list(self._records.values())
        if limit:
            return records[:limit]
        return records

    def create(self, fields: Dict[str, Any]) -> R:
        id = self._current_id
        self._current_id += 1

        now = _now()
        data = dict(fields)
        data["id"] = id
        for name in self.created_fields:
            data[name] = now
        if self.updated_field:
            data[self.updated_field] = now
        for name in self.cleared_fields:
            data[name] = None

        record = self.model(**data)
        self._records[id] = record
        return record

    def update(self, id: int, partial: Dict[str, Any]) -> Optional[R]:
        """
        Shallow-merge `partial` over the stored record.

        Omitted fields keep their value, a present None overwrites.
        id and creation timestamps are never touched.
        """
        record = self._records.get(id)
        if record is None:
            return None

        changes = {
            k: v for k, v in partial.items()
            if k != "id" and k not in self.created_fields and k in self.model.model_fields
        }
        if self.updated_field:
            changes[self.updated_field] = _now()

        updated = record.model_copy(update=changes)
        self._records[id] = updated
        return updated

    def delete(self, id: int) -> bool:
        return self._records.pop(id, None) is not None


class UserCollection(EntityCollection[User]):

    def __init__(self):
        super().__init__(User)

    def get_by_username(self, username: str) -> Optional[User]:
        for user in self._records.values():
            if user.username == username:
                return user
        return None


class MemStorage:
    """All six entity collections for one process"""

    def __init__(self):
        self.users = UserCollection()
        self.incidents: EntityCollection[Incident] = EntityCollection(
            Incident,
            created_fields=("reported_at",),
            cleared_fields=("verified_by", "verified_at"),
        )
        self.call_logs: EntityCollection[CallLog] = EntityCollection(
            CallLog, created_fields=("logged_at",)
        )
        self.alerts: EntityCollection[Alert] = EntityCollection(Alert)
        self.social_trends: EntityCollection[SocialTrend] = EntityCollection(SocialTrend)
        self.response_plans: EntityCollection[ResponsePlan] = EntityCollection(
            ResponsePlan, updated_field="updated_at"
        )


def get_store(request: Request) -> MemStorage:
    """FastAPI dependency - the store built at startup"""
    return request.app.state.store


# =============================================================================
# SAMPLE DATA
# =============================================================================

def seed_sample_data(store: MemStorage):
    """Admin account plus a small demo data set for the dashboard"""
    store.users.create({
        "username": "admin",
        "password": "Admin123",
        "full_name": "Admin User",
        "email": "admin@ipcr.gov.ng",
        "role": "admin",
        "agency": "IPCR",
    })

    store.incidents.create({
        "title": "Armed Conflict Escalation",
        "description": "Reports of armed clashes between militant groups and military in northern Borno state.",
        "location": "Borno State",
        "coordinates": {"lat": 11.8496, "lng": 13.1571},
        "incident_type": "militancy",
        "severity": "critical",
        "status": "active",
        "reported_by": 1,
        "affected_population": 5000,
        "media_links": ["https://example.com/report1.pdf"],
        "tags": ["armed", "military", "conflict"],
    })
    store.incidents.create({
        "title": "Farmer-Herder Conflict",
        "description": "Clashes between farmers and herders in Benue state resulting in casualties",
        "location": "Benue State",
        "coordinates": {"lat": 7.7322, "lng": 8.5391},
        "incident_type": "farmer-herder",
        "severity": "high",
        "status": "investigating",
        "reported_by": 1,
        "affected_population": 2000,
        "media_links": ["https://example.com/report2.pdf"],
        "tags": ["farmers", "herders", "land", "conflict"],
    })
    store.incidents.create({
        "title": "Political Tensions",
        "description": "Political rallies turning violent in southwestern states",
        "location": "Lagos State",
        "coordinates": {"lat": 6.5244, "lng": 3.3792},
        "incident_type": "political",
        "severity": "medium",
        "status": "active",
        "reported_by": 1,
        "affected_population": 10000,
        "media_links": ["https://example.com/report3.pdf"],
        "tags": ["political", "rally", "elections"],
    })

    expires = _now() + timedelta(hours=24)
    store.alerts.create({
        "title": "Armed Conflict Escalation",
        "description": "Reports of armed clashes between militant groups and military in northern Borno state.",
        "alert_type": "security",
        "severity": "critical",
        "source": "field_report",
        "expires_at": expires,
        "status": "active",
        "related_incident_id": 1,
        "sent_to": [1],
    })
    store.alerts.create({
        "title": "Hate Speech Detection",
        "description": "Social media monitoring detected increased ethnic-targeted hate speech in Kaduna area.",
        "alert_type": "social_media",
        "severity": "high",
        "source": "social_monitoring",
        "expires_at": expires,
        "status": "active",
        "sent_to": [1],
    })
    store.alerts.create({
        "title": "Community Displacement",
        "description": "Multiple families reported leaving villages due to threats from suspected bandits.",
        "alert_type": "humanitarian",
        "severity": "medium",
        "source": "community_report",
        "expires_at": expires,
        "status": "active",
        "sent_to": [1],
    })

    store.social_trends.create({
        "platform": "twitter",
        "keyword": "#SecurityNigeria",
        "volume": 1250,
        "sentiment": -0.65,
        "location": "Nationwide",
        "source": "Twitter API",
        "related_incident_types": ["militancy", "banditry"],
    })
    store.social_trends.create({
        "platform": "twitter",
        "keyword": "#BornoState",
        "volume": 850,
        "sentiment": -0.8,
        "location": "Borno",
        "source": "Twitter API",
        "related_incident_types": ["militancy"],
    })
    store.social_trends.create({
        "platform": "facebook",
        "keyword": "FarmerHerder",
        "volume": 425,
        "sentiment": -0.55,
        "location": "Benue",
        "source": "Facebook API",
        "related_incident_types": ["farmer-herder"],
    })

    store.response_plans.create({
        "title": "Armed Conflict Response Plan",
        "description": "Comprehensive response plan for armed conflicts",
        "incident_type": "militancy",
        "severity": "critical",
        "steps": [
            {"order": 1, "title": "Incident Verification", "description": "Verify the reports with local security agencies"},
            {"order": 2, "title": "Secure Area", "description": "Deploy security personnel to secure the affected area"},
            {"order": 3, "title": "Evacuate Civilians", "description": "Coordinate evacuation of civilians if necessary"},
            {"order": 4, "title": "Medical Response", "description": "Deploy medical teams to treat casualties"},
        ],
        "contact_agencies": [
            {"name": "Nigeria Army", "contact": "army@example.com", "role": "Security"},
            {"name": "Nigeria Police", "contact": "police@example.com", "role": "Security"},
            {"name": "Red Cross", "contact": "redcross@example.com", "role": "Medical"},
        ],
        "resources": [
            {"type": "Personnel", "quantity": 50, "description": "Security personnel"},
            {"type": "Vehicle", "quantity": 10, "description": "Armored vehicles"},
            {"type": "Medical", "quantity": 5, "description": "Medical teams"},
        ],
        "created_by": 1,
    })

    logger.info(
        f"Sample data seeded: {len(store.users)} users, {len(store.incidents)} incidents, "
        f"{len(store.alerts)} alerts, {len(store.social_trends)} social trends, "
        f"{len(store.response_plans)} response plans"
    )
