# /brandflow/flows/competitor_watch.py

from typing import Any, Dict

from brandflow.config.prompts import COMPETITOR_WATCH_PROMPT
from brandflow.flows.base import CachedGenerationFlow
from brandflow.models.api import CompetitorWatchInput
from brandflow.models.domain import CompetitorReport
from brandflow.services.ai_service import GenerationParams
from brandflow.services.response_parser import FALLBACK_CONFIDENCE, parse_flow_response


def build_competitor_prompt(request: CompetitorWatchInput) -> str:
    details = []
    if request.competitors:
        details.append(f"**Competitors:** {', '.join(request.competitors)}")
    if request.focus_areas:
        details.append(f"**Focus Areas:** {', '.join(request.focus_areas)}")
    if not details:
        details.append("**Competitors:** the main competitors in our market")
    return COMPETITOR_WATCH_PROMPT.format(check_type=request.check_type, details="\n".join(details))


def build_competitor_fallback(request: CompetitorWatchInput, generated_at: str) -> Dict[str, Any]:
    subject = ", ".join(request.competitors) if request.competitors else "tracked competitors"
    return CompetitorReport(
        changes=[],
        summary=f"No verified changes could be extracted for {subject} in this {request.check_type} check.",
        action_required=False,
        confidence=FALLBACK_CONFIDENCE,
        generated_at=generated_at,
    ).to_document()


class CompetitorWatchFlow(CachedGenerationFlow[CompetitorWatchInput]):
    name = "competitorWatch"
    input_model = CompetitorWatchInput
    generation_params = GenerationParams(temperature=0.3, max_output_tokens=2048)

    def build_prompt(self, flow_input: CompetitorWatchInput) -> str:
        return build_competitor_prompt(flow_input)

    def parse_response(self, raw_text: str, flow_input: CompetitorWatchInput) -> Dict[str, Any]:
        generated_at = self.now_iso()
        return parse_flow_response(
            raw_text,
            lambda: build_competitor_fallback(flow_input, generated_at),
            flow_name=self.name,
            generated_at=generated_at,
        )
