# /brandflow/flows/brand_positioning.py

from datetime import timedelta
from typing import Any, Dict

from brandflow.config.prompts import BRAND_POSITIONING_PROMPT
from brandflow.config.settings import settings
from brandflow.flows.base import CachedGenerationFlow
from brandflow.models.api import BrandInput
from brandflow.models.domain import (
    BrandPillar, BrandPositioning, MessagingFramework, TargetPersona, ToneOfVoice,
)
from brandflow.services.ai_service import GenerationParams
from brandflow.services.response_parser import FALLBACK_CONFIDENCE, parse_flow_response


def build_brand_prompt(brand: BrandInput) -> str:
    details = [
        f"**Company:** {brand.company_name}",
        f"**Industry:** {brand.industry}",
        f"**Target Audience:** {brand.target_audience}",
    ]
    if brand.current_positioning:
        details.append(f"**Current Positioning:** {brand.current_positioning}")
    if brand.competitors:
        details.append(f"**Competitors:** {', '.join(brand.competitors)}")
    if brand.unique_strengths:
        details.append(f"**Unique Strengths:** {', '.join(brand.unique_strengths)}")
    if brand.business_goals:
        details.append(f"**Business Goals:** {brand.business_goals}")
    return BRAND_POSITIONING_PROMPT.format(details="\n".join(details))


def build_brand_fallback(brand: BrandInput, generated_at: str) -> Dict[str, Any]:
    return BrandPositioning(
        positioning_statement=(
            f"For {brand.target_audience} in the {brand.industry} space, "
            f"{brand.company_name} delivers exceptional value."
        ),
        value_proposition=f"{brand.company_name} helps {brand.target_audience} achieve their goals.",
        brand_pillars=[
            BrandPillar(
                pillar="Quality",
                description="Commitment to excellence",
                proof_points=["Industry expertise", "Proven results"],
            ),
        ],
        target_personas=[
            TargetPersona(
                name="Primary Buyer",
                description=brand.target_audience,
                pain_points=["Needs better solutions"],
                motivations=["Business growth"],
            ),
        ],
        competitive_differentiators=["Unique approach", "Expert team"],
        messaging_framework=MessagingFramework(
            headline=f"{brand.company_name}: Your Partner in {brand.industry}",
            subheadline="Delivering results that matter",
            key_messages=["Trusted expertise", "Proven results"],
            call_to_action="Get Started Today",
        ),
        tone_of_voice=ToneOfVoice(
            attributes=["Professional", "Approachable", "Confident"],
            do_examples=["Be clear and direct", "Show empathy"],
            dont_examples=["Use jargon", "Be condescending"],
        ),
        confidence=FALLBACK_CONFIDENCE,
        generated_at=generated_at,
    ).to_document()


class BrandPositioningFlow(CachedGenerationFlow[BrandInput]):
    """Brand strategy for one company, cached per company name."""

    name = "brandPositioning"
    input_model = BrandInput
    generation_params = GenerationParams(temperature=0.7, max_output_tokens=4096)
    cache_ttl = timedelta(days=settings.brand_cache_ttl_days)
    cache_prefix = "brand"
    cache_key_field = "company_name"

    def build_prompt(self, flow_input: BrandInput) -> str:
        return build_brand_prompt(flow_input)

    def parse_response(self, raw_text: str, flow_input: BrandInput) -> Dict[str, Any]:
        generated_at = self.now_iso()
        return parse_flow_response(
            raw_text,
            lambda: build_brand_fallback(flow_input, generated_at),
            flow_name=self.name,
            generated_at=generated_at,
        )
