from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ValidationStatus(str, Enum):
    """How proven an idea's hypothesis is.

    Any status may move to any other; the lifecycle is logged, not constrained.
    ``UNKNOWN`` is the read-side fallback for legacy/unrecognised stored
    values and is never accepted as input.
    """

    BACKLOG = "backlog"
    FIRST_LEVEL = "firstLevel"
    SECOND_LEVEL = "secondLevel"
    SCALING = "scaling"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @classmethod
    def known(cls) -> List["ValidationStatus"]:
        return [status for status in cls if status is not cls.UNKNOWN]


class Source(str, Enum):
    CUSTOMER_FEEDBACK = "customerFeedback"
    TEAM_BRAINSTORM = "teamBrainstorm"
    COMPETITOR_ANALYSIS = "competitorAnalysis"
    USER_RESEARCH = "userResearch"
    MARKET_TREND = "marketTrend"
    INTERNAL_REQUEST = "internalRequest"
    OTHER = "other"


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def reject_unknown_status(value: Optional[ValidationStatus]) -> Optional[ValidationStatus]:
    if value is ValidationStatus.UNKNOWN:
        raise ValueError(
            "validationStatus must be one of: "
            + ", ".join(status.value for status in ValidationStatus.known())
        )
    return value


class HistoryEntry(CamelModel):
    """One status transition in an idea's history."""

    status: ValidationStatus
    timestamp: datetime
    notes: Optional[str] = None


class Idea(CamelModel):
    """Read model for a stored idea record."""

    id: str
    idea_number: int
    name: Optional[str] = None
    hypothesis: Optional[str] = None
    validation_status: Optional[ValidationStatus] = None
    status_history: List[Any] = Field(default_factory=list)
    upvotes: int = 0
    source: Optional[Source] = None
    portfolio_code: str
    product_code: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("validation_status", mode="before")
    @classmethod
    def unknown_status_fallback(cls, v: Any) -> Any:
        if v is None or isinstance(v, ValidationStatus):
            return v
        try:
            return ValidationStatus(v)
        except ValueError:
            return ValidationStatus.UNKNOWN

    @field_validator("source", mode="before")
    @classmethod
    def unknown_source_dropped(cls, v: Any) -> Any:
        if v is None or isinstance(v, Source):
            return v
        try:
            return Source(v)
        except ValueError:
            return None

    @field_validator("status_history", mode="before")
    @classmethod
    def null_history(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("upvotes", mode="before")
    @classmethod
    def null_upvotes(cls, v: Any) -> Any:
        return 0 if v is None else v


class IdeaInput(CamelModel):
    """Form body for a new idea. Emptiness is checked by the lifecycle engine."""

    name: str = ""
    hypothesis: str = ""
    validation_status: Optional[ValidationStatus] = None
    source: Optional[Source] = None

    @field_validator("validation_status")
    @classmethod
    def known_status(cls, v: Optional[ValidationStatus]) -> Optional[ValidationStatus]:
        return reject_unknown_status(v)


class IdeaCreate(CamelModel):
    """A new idea targeted at one (portfolio, product) scope."""

    portfolio_code: str
    product_code: str
    name: str = ""
    hypothesis: str = ""
    validation_status: Optional[ValidationStatus] = None
    source: Optional[Source] = None

    @field_validator("validation_status")
    @classmethod
    def known_status(cls, v: Optional[ValidationStatus]) -> Optional[ValidationStatus]:
        return reject_unknown_status(v)


class IdeaUpdate(CamelModel):
    """Partial update; only fields that are set are applied."""

    name: Optional[str] = None
    hypothesis: Optional[str] = None
    validation_status: Optional[ValidationStatus] = None
    source: Optional[Source] = None

    @field_validator("validation_status")
    @classmethod
    def known_status(cls, v: Optional[ValidationStatus]) -> Optional[ValidationStatus]:
        return reject_unknown_status(v)


class UpvoteRequest(CamelModel):
    observed_upvotes: int = Field(..., ge=0)


class IdeaDetail(Idea):
    """An idea with its status history parsed, newest first."""

    history: List[HistoryEntry] = Field(default_factory=list)


class IdeaListResponse(CamelModel):
    portfolio_code: str
    product_code: str
    sort: str
    filter: str
    count: int
    ideas: List[Idea]


class FunnelResponse(CamelModel):
    portfolio_code: str
    product_code: str
    counts: dict[str, int]
    stages: dict[str, List[Idea]]
