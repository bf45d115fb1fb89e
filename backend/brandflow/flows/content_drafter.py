# /brandflow/flows/content_drafter.py

from typing import Any, Dict

from brandflow.config.prompts import CONTENT_DRAFTER_PROMPT
from brandflow.flows.base import CachedGenerationFlow
from brandflow.models.api import ContentDraftInput
from brandflow.models.domain import ContentBrief, ContentDraft, ContentPackage
from brandflow.services.ai_service import GenerationParams
from brandflow.services.response_parser import FALLBACK_CONFIDENCE, parse_flow_response

PLATFORM_LABELS = {
    "linkedin": "LinkedIn",
    "twitter": "Twitter/X",
    "email": "Email",
    "blog": "Blog",
    "instagram": "Instagram",
}

DEFAULT_AUDIENCE = "our audience"


def build_content_prompt(request: ContentDraftInput) -> str:
    details = [
        f"**Topic:** {request.topic}",
        f"**Platforms:** {', '.join(PLATFORM_LABELS[p] for p in request.platforms)}",
        f"**Tone:** {request.tone}",
    ]
    if request.target_audience:
        details.append(f"**Target Audience:** {request.target_audience}")
    return CONTENT_DRAFTER_PROMPT.format(details="\n".join(details))


def _fallback_draft(platform: str, topic: str) -> ContentDraft:
    if platform == "twitter":
        content = f"New perspective on {topic}. What does it mean for your team?"
    elif platform == "email":
        content = f"Subject: {topic}\n\nHi there,\n\nWe have been thinking about {topic} and wanted to share a few ideas with you."
    else:
        content = f"Here is how we are approaching {topic}, and why it matters right now."
    hashtags = [] if platform in ("email", "blog") else ["#Marketing", "#Growth"]
    return ContentDraft(platform=platform, content=content, hashtags=hashtags, character_count=len(content))


def build_content_fallback(request: ContentDraftInput, generated_at: str) -> Dict[str, Any]:
    return ContentPackage(
        drafts=[_fallback_draft(platform, request.topic) for platform in request.platforms],
        brief=ContentBrief(
            headline=request.topic,
            key_messages=[f"Why {request.topic} matters", "What to do next"],
            target_audience=request.target_audience or DEFAULT_AUDIENCE,
            call_to_action="Learn More",
        ),
        confidence=FALLBACK_CONFIDENCE,
        generated_at=generated_at,
    ).to_document()


class ContentDrafterFlow(CachedGenerationFlow[ContentDraftInput]):
    name = "contentDrafter"
    input_model = ContentDraftInput
    generation_params = GenerationParams(temperature=0.8, max_output_tokens=2048)

    def build_prompt(self, flow_input: ContentDraftInput) -> str:
        return build_content_prompt(flow_input)

    def parse_response(self, raw_text: str, flow_input: ContentDraftInput) -> Dict[str, Any]:
        generated_at = self.now_iso()
        return parse_flow_response(
            raw_text,
            lambda: build_content_fallback(flow_input, generated_at),
            flow_name=self.name,
            generated_at=generated_at,
        )
