"""
Request schemas and validators - EWERS

Each entity kind gets one EntitySchema. The same object validates POST
bodies (all required fields) and PUT bodies (partial - only what was
sent), and hands back a ValidationResult instead of raising, so routes
decide the status code.

Server-known fields (reportedBy, loggedBy, createdBy) are not part of
any schema; routes inject them from the session user.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, create_model
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Literal, Optional, Type
from dataclasses import dataclass, field
from datetime import datetime

from models import Coordinates, PlanStep, ContactAgency, PlanResource


Severity = Literal['critical', 'high', 'medium', 'low']
IncidentStatus = Literal['active', 'investigating', 'resolved', 'closed']
UserRole = Literal['admin', 'user', 'analyst', 'responder', 'call_agent']


class RequestSchema(BaseModel):
    """camelCase in, snake_case attributes, unknown keys dropped"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )


# =============================================================================
# ENTITY SCHEMAS
# =============================================================================

class UserCreate(RequestSchema):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    full_name: str
    email: EmailStr
    role: UserRole = 'user'
    agency: Optional[str] = None


class IncidentCreate(RequestSchema):
    title: str = Field(min_length=1)
    description: str
    location: str
    coordinates: Coordinates
    incident_type: str
    severity: Severity
    status: IncidentStatus = 'active'
    affected_population: Optional[int] = None
    media_links: Optional[List[str]] = Field(default_factory=list)
    tags: Optional[List[str]] = Field(default_factory=list)


class IncidentFields(IncidentCreate):
    """Incident fields editable after creation (adds verification)"""
    verified_by: Optional[int] = None
    verified_at: Optional[datetime] = None


class CallLogCreate(RequestSchema):
    caller_name: str = Field(min_length=1)
    contact_number: str
    location: str
    incident_type: str
    severity: Severity
    description: str
    immediate_actions: Optional[List[str]] = Field(default_factory=list)
    status: str = 'pending'
    related_incident_id: Optional[int] = None


class AlertCreate(RequestSchema):
    title: str = Field(min_length=1)
    description: str
    alert_type: str
    severity: Severity
    source: str
    expires_at: Optional[datetime] = None
    status: str = 'active'
    related_incident_id: Optional[int] = None
    sent_to: Optional[List[int]] = Field(default_factory=list)


class SocialTrendCreate(RequestSchema):
    platform: str
    keyword: str = Field(min_length=1)
    volume: int
    sentiment: Optional[float] = None
    location: Optional[str] = None
    source: str
    related_incident_types: Optional[List[str]] = Field(default_factory=list)


class ResponsePlanCreate(RequestSchema):
    title: str = Field(min_length=1)
    description: str
    incident_type: str
    severity: Severity
    steps: List[PlanStep]
    contact_agencies: List[ContactAgency]
    resources: Optional[List[PlanResource]] = Field(default_factory=list)


# =============================================================================
# VALIDATION RESULT
# =============================================================================

@dataclass
class FieldError:
    path: str
    message: str


@dataclass
class ValidationResult:
    """Outcome of EntitySchema.validate - value on success, errors otherwise"""
    value: Optional[Dict[str, Any]] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        """All field errors in one line, e.g. 'Validation error: Field required at "title"'"""
        if not self.errors:
            return ""
        parts = []
        for e in self.errors:
            parts.append(f'{e.message} at "{e.path}"' if e.path else e.message)
        return "Validation error: " + "; ".join(parts)


def _format_errors(exc: ValidationError) -> List[FieldError]:
    return [
        FieldError(path=".".join(str(p) for p in err["loc"]), message=err["msg"])
        for err in exc.errors()
    ]


def _partial_model(model: Type[RequestSchema]) -> Type[RequestSchema]:
    """Same fields as `model`, every one optional with no default"""
    fields = {
        name: (Optional[info.annotation], None)
        for name, info in model.model_fields.items()
    }
    return create_model(f"{model.__name__}Partial", __base__=RequestSchema, **fields)


class EntitySchema:
    """
    Validator for one entity kind, shared by create and update paths.

    create: every required field must be present; defaults are applied.
    partial: only the keys the client sent come back in `value`, so the
    store merge leaves everything else alone. A sent null stays a null.
    """

    def __init__(self, name: str, model: Type[RequestSchema], update_model: Type[RequestSchema] = None):
        self.name = name
        self.model = model
        self.update_model = _partial_model(update_model or model)

    def validate(self, payload: Any, partial: bool = False) -> ValidationResult:
        if not isinstance(payload, dict):
            return ValidationResult(errors=[FieldError(path="", message="Expected object")])

        model = self.update_model if partial else self.model
        try:
            parsed = model.model_validate(payload)
        except ValidationError as e:
            return ValidationResult(errors=_format_errors(e))

        if partial:
            # Keep nested models as instances so the store merge stays typed
            value = {name: getattr(parsed, name) for name in parsed.model_fields_set}
        else:
            value = parsed.model_dump()
        return ValidationResult(value=value)


user_schema = EntitySchema("user", UserCreate)
incident_schema = EntitySchema("incident", IncidentCreate, update_model=IncidentFields)
call_log_schema = EntitySchema("call log", CallLogCreate)
alert_schema = EntitySchema("alert", AlertCreate)
social_trend_schema = EntitySchema("social trend", SocialTrendCreate)
response_plan_schema = EntitySchema("response plan", ResponsePlanCreate)


# =============================================================================
# AUTH REQUEST BODIES
# =============================================================================

class LoginRequest(BaseModel):
    username: str
    password: str
