# backend/tests/unit/test_prompts.py
from brandflow.flows.brand_positioning import build_brand_prompt
from brandflow.flows.chatbot import to_transcript
from brandflow.flows.competitor_watch import build_competitor_prompt
from brandflow.flows.content_drafter import build_content_prompt
from brandflow.models.api import BrandInput, ChatbotInput, CompetitorWatchInput, ContentDraftInput


def test_brand_prompt_includes_every_present_optional_field():
    brand = BrandInput(
        companyName="Acme Corp",
        industry="Logistics",
        targetAudience="Mid-size retailers",
        currentPositioning="Cheapest carrier",
        competitors=["Globex", "Initech"],
        uniqueStrengths=["Same-day delivery"],
        businessGoals="Double enterprise revenue",
    )

    prompt = build_brand_prompt(brand)

    assert "**Company:** Acme Corp" in prompt
    assert "**Current Positioning:** Cheapest carrier" in prompt
    assert "**Competitors:** Globex, Initech" in prompt
    assert "**Unique Strengths:** Same-day delivery" in prompt
    assert "**Business Goals:** Double enterprise revenue" in prompt
    assert "Return ONLY valid JSON" in prompt
    assert '"positioningStatement"' in prompt


def test_brand_prompt_omits_absent_or_empty_fields():
    brand = BrandInput(companyName="Acme Corp", industry="Logistics", targetAudience="Retailers", competitors=[])

    prompt = build_brand_prompt(brand)

    assert "Current Positioning" not in prompt
    assert "Competitors" not in prompt
    assert "Unique Strengths" not in prompt
    assert "Business Goals" not in prompt
    assert "**Target Audience:** Retailers\n\nRespond with a JSON object" in prompt


def test_chat_transcript_folds_system_messages_into_header():
    chat = ChatbotInput(messages=[
        {"role": "system", "content": "Company: Acme Corp"},
        {"role": "user", "content": "  What should we post this week?  "},
        {"role": "assistant", "content": "A launch teaser."},
        {"role": "user", "content": "Draft it."},
    ])

    transcript = to_transcript(chat.messages)

    assert transcript.startswith("You are Prometheus AI, an executive assistant.")
    assert "System context:\nCompany: Acme Corp" in transcript
    assert "User: What should we post this week?\nAssistant: A launch teaser.\nUser: Draft it." in transcript
    assert transcript.endswith("\n\nAssistant:")


def test_chat_transcript_without_system_messages_has_no_context_section():
    chat = ChatbotInput(messages=[{"role": "user", "content": "Hi"}])

    transcript = to_transcript(chat.messages)

    assert "System context" not in transcript
    assert "Conversation:\nUser: Hi\n\nAssistant:" in transcript


def test_content_prompt_lists_platforms_and_optional_audience():
    request = ContentDraftInput(topic="Spring launch", platforms=["twitter", "blog"], targetAudience="Founders")

    prompt = build_content_prompt(request)

    assert "**Topic:** Spring launch" in prompt
    assert "**Platforms:** Twitter/X, Blog" in prompt
    assert "**Tone:** professional" in prompt
    assert "**Target Audience:** Founders" in prompt

    assert "Target Audience:**" not in build_content_prompt(ContentDraftInput(topic="Spring launch"))


def test_competitor_prompt_mentions_check_type_and_competitors():
    prompt = build_competitor_prompt(CompetitorWatchInput(checkType="full", competitors=["Globex"], focusAreas=["pricing"]))

    assert "Run a full review" in prompt
    assert "**Competitors:** Globex" in prompt
    assert "**Focus Areas:** pricing" in prompt
    assert "Return ONLY valid JSON" in prompt
