# /brandflow/models/api.py

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Dict, Optional, Literal
from datetime import datetime, timezone

# Pydantic models for the JSON bodies the API accepts. Flow inputs use camelCase
# on the wire (companyName, targetAudience, ...) and are immutable once parsed.

ContentPlatform = Literal["linkedin", "twitter", "email", "blog", "instagram"]
ChangeType = Literal["pricing", "messaging", "features", "design", "content"]


class FlowInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class BrandInput(FlowInput):
    company_name: str = Field(..., min_length=1)
    industry: str = Field(..., min_length=1)
    target_audience: str = Field(..., min_length=1)
    current_positioning: Optional[str] = None
    competitors: Optional[List[str]] = None
    unique_strengths: Optional[List[str]] = None
    business_goals: Optional[str] = None


class ChatMessage(FlowInput):
    role: Literal["user", "assistant", "system"]
    content: str = Field(..., min_length=1)


class ChatbotInput(FlowInput):
    messages: List[ChatMessage] = Field(..., min_length=1, max_length=40)


class ContentDraftInput(FlowInput):
    topic: str = Field(..., min_length=1)
    platforms: List[ContentPlatform] = Field(
        default_factory=lambda: ["linkedin", "twitter", "email"], min_length=1
    )
    tone: str = "professional"
    target_audience: Optional[str] = None


class CompetitorWatchInput(FlowInput):
    check_type: Literal["quick", "full"] = "quick"
    competitors: Optional[List[str]] = None
    focus_areas: Optional[List[ChangeType]] = None


class LeadSubmission(BaseModel):
    """Contact-form fields, forwarded as-is to the lead-processing function. Unknown fields pass through."""
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=2, max_length=200)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=320)
    company: Optional[str] = None
    phone: Optional[str] = None
    message: str = Field(..., min_length=1, max_length=5000)
    source: str = "contact_form"
    referrer: Optional[str] = None


class APIResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Dict] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
