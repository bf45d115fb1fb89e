# /brandflow/models/domain.py

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Dict, Optional, Any, Literal
from datetime import datetime

# Core models used by the flows. Output models describe the shape every flow
# promises to return; fallback objects are built from them so they always
# conform. Parsed model output is returned as a plain mapping and is NOT
# re-validated against these models.


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class FlowOutput(CamelModel):
    confidence: float = Field(..., ge=0.0, le=1.0)
    generated_at: str


# --- Brand positioning ---

class BrandPillar(CamelModel):
    pillar: str
    description: str
    proof_points: List[str]


class TargetPersona(CamelModel):
    name: str
    description: str
    pain_points: List[str]
    motivations: List[str]


class MessagingFramework(CamelModel):
    headline: str
    subheadline: str
    key_messages: List[str]
    call_to_action: str


class ToneOfVoice(CamelModel):
    attributes: List[str]
    do_examples: List[str]
    dont_examples: List[str]


class BrandPositioning(FlowOutput):
    positioning_statement: str
    value_proposition: str
    brand_pillars: List[BrandPillar]
    target_personas: List[TargetPersona]
    competitive_differentiators: List[str]
    messaging_framework: MessagingFramework
    tone_of_voice: ToneOfVoice


# --- Chatbot ---

class ChatbotReply(FlowOutput):
    reply: str


# --- Content drafter ---

class ContentDraft(CamelModel):
    platform: str
    content: str
    hashtags: List[str] = []
    character_count: int


class ContentBrief(CamelModel):
    headline: str
    key_messages: List[str]
    target_audience: str
    call_to_action: str


class ContentPackage(FlowOutput):
    drafts: List[ContentDraft]
    brief: ContentBrief


# --- Competitor watch ---

class CompetitorChange(CamelModel):
    competitor: str
    change_type: Literal["pricing", "messaging", "features", "design", "content"]
    description: str
    severity: Literal["low", "medium", "high"]
    detected_at: str


class CompetitorReport(FlowOutput):
    changes: List[CompetitorChange]
    summary: str
    action_required: bool


# --- Persistence records ---

class CacheEntry(CamelModel):
    key: str
    payload: Dict[str, Any]
    cached_at: datetime


class ExecutionLogRecord(CamelModel):
    """One append-only audit record per flow invocation. The store stamps `timestamp`."""
    name: str
    input: Dict[str, Any]
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    duration_ms: int
    success: bool
    cached: bool = False
