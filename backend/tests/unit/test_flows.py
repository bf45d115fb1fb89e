# backend/tests/unit/test_flows.py
import json
import pytest
from datetime import timedelta
from unittest.mock import AsyncMock

from brandflow.flows.brand_positioning import BrandPositioningFlow
from brandflow.flows.chatbot import ChatbotFlow
from brandflow.flows.competitor_watch import CompetitorWatchFlow
from brandflow.flows.content_drafter import ContentDrafterFlow
from brandflow.flows.errors import GenerationError, ValidationError
from brandflow.models.domain import BrandPositioning, CompetitorReport, ContentPackage
from brandflow.services.response_parser import FALLBACK_CONFIDENCE, PARSED_CONFIDENCE

ACME = {"companyName": "Acme Corp", "industry": "Logistics", "targetAudience": "Mid-size retailers"}


@pytest.fixture
def brand_flow(store, generator, clock):
    return BrandPositioningFlow(store, generator, clock=clock)


# --- Brand positioning: cache-or-generate ---

@pytest.mark.asyncio
async def test_first_call_generates_and_caches_under_normalized_key(brand_flow, store, generator, brand_json):
    generator.queue(brand_json)

    result = await brand_flow.run(ACME)

    assert len(generator.calls) == 1
    assert result["valueProposition"] == "Acme Corp turns plans into shipped work."
    assert result["confidence"] == PARSED_CONFIDENCE
    assert result["generatedAt"] == "2025-03-01T12:00:00.000Z"

    cached = store.collections["cache"]["brand_acme_corp"]
    assert cached["payload"] == result
    assert cached["input"]["companyName"] == "Acme Corp"

    [record] = store.records("flows")
    assert record["name"] == "brandPositioning"
    assert record["success"] is True
    assert record["cached"] is False
    assert record["output"] == result
    assert record["durationMs"] >= 0


@pytest.mark.asyncio
async def test_second_call_within_ttl_is_served_from_cache(brand_flow, generator, clock, store, brand_json):
    generator.queue(brand_json)
    first = await brand_flow.run(ACME)

    clock.advance(timedelta(days=6))
    second = await brand_flow.run({**ACME, "companyName": "  acme   CORP "})

    assert second == first
    assert len(generator.calls) == 1
    records = store.records("flows")
    assert [r["cached"] for r in records] == [False, True]
    assert store.collections["cache"]["brand_acme_corp"]["cachedAt"] == clock.now - timedelta(days=6)


@pytest.mark.asyncio
async def test_stale_entry_is_regenerated_and_overwritten(brand_flow, generator, clock, store, brand_json):
    generator.queue(brand_json, brand_json)
    await brand_flow.run(ACME)

    clock.advance(timedelta(days=7, seconds=1))
    await brand_flow.run(ACME)

    assert len(generator.calls) == 2
    assert store.collections["cache"]["brand_acme_corp"]["cachedAt"] == clock.now


@pytest.mark.asyncio
async def test_different_companies_use_different_cache_entries(brand_flow, generator, store, brand_json):
    generator.queue(brand_json, brand_json)

    await brand_flow.run(ACME)
    await brand_flow.run({**ACME, "companyName": "Globex"})

    assert len(generator.calls) == 2
    assert set(store.collections["cache"]) == {"brand_acme_corp", "brand_globex"}


@pytest.mark.asyncio
async def test_generation_failure_logs_and_reraises_without_caching(brand_flow, generator, store):
    error = GenerationError("upstream 503")
    generator.queue(error)

    with pytest.raises(GenerationError) as exc_info:
        await brand_flow.run(ACME)

    assert exc_info.value is error
    assert "cache" not in store.collections
    [record] = store.records("flows")
    assert record["success"] is False
    assert record["error"] == "upstream 503"
    assert "output" not in record


@pytest.mark.asyncio
async def test_generation_failure_keeps_existing_cache_entry(brand_flow, generator, clock, store, brand_json):
    generator.queue(brand_json, GenerationError("timeout"))
    first = await brand_flow.run(ACME)
    clock.advance(timedelta(days=8))

    with pytest.raises(GenerationError):
        await brand_flow.run(ACME)

    assert store.collections["cache"]["brand_acme_corp"]["payload"] == first


@pytest.mark.asyncio
async def test_non_json_output_returns_fallback_built_from_input(brand_flow, generator, store):
    generator.queue("Sorry, I cannot help with that.")

    result = await brand_flow.run(ACME)

    assert result["confidence"] == FALLBACK_CONFIDENCE
    assert "Acme Corp" in result["valueProposition"]
    assert "Mid-size retailers" in result["positioningStatement"]
    assert result["messagingFramework"]["headline"] == "Acme Corp: Your Partner in Logistics"
    BrandPositioning.model_validate(result)
    assert store.collections["cache"]["brand_acme_corp"]["payload"] == result


@pytest.mark.asyncio
async def test_fallback_is_deterministic_for_the_same_input(store, generator, clock):
    generator.queue("nope", "still nope")
    first = await BrandPositioningFlow(store, generator, clock=clock).run(ACME)
    store.collections.clear()
    second = await BrandPositioningFlow(store, generator, clock=clock).run(ACME)

    assert first == second


@pytest.mark.asyncio
async def test_invalid_input_is_rejected_before_any_io(brand_flow, store, generator):
    with pytest.raises(ValidationError) as exc_info:
        await brand_flow.run({"companyName": "", "industry": "Logistics"})

    assert exc_info.value.errors
    assert store.calls == []
    assert generator.calls == []


@pytest.mark.asyncio
async def test_log_append_failure_does_not_block_the_result(brand_flow, store, generator, brand_json):
    generator.queue(brand_json)
    store.failing.add("append")

    result = await brand_flow.run(ACME)

    assert result["confidence"] == PARSED_CONFIDENCE
    assert "brand_acme_corp" in store.collections["cache"]


@pytest.mark.asyncio
async def test_cache_write_failure_does_not_block_the_result(brand_flow, store, generator, brand_json):
    generator.queue(brand_json)
    store.failing.add("set")

    result = await brand_flow.run(ACME)

    assert result["confidence"] == PARSED_CONFIDENCE
    assert store.records("flows")[0]["success"] is True


@pytest.mark.asyncio
async def test_failure_is_reported_to_alerting(store, generator, clock):
    alerting = AsyncMock()
    generator.queue(GenerationError("quota exceeded"))
    flow = BrandPositioningFlow(store, generator, alerting=alerting, clock=clock)

    with pytest.raises(GenerationError):
        await flow.run(ACME)

    alerting.send_critical_alert.assert_awaited_once()
    assert alerting.send_critical_alert.await_args.args[0] == "quota exceeded"


# --- Uncached flows ---

@pytest.mark.asyncio
async def test_chatbot_returns_trimmed_reply_and_never_caches(store, generator, clock):
    generator.queue("  Post the teaser on Tuesday.  ", "Again")
    flow = ChatbotFlow(store, generator, clock=clock)
    chat = {"messages": [{"role": "user", "content": "When should we post?"}]}

    result = await flow.run(chat)
    await flow.run(chat)

    assert result == {"reply": "Post the teaser on Tuesday.", "confidence": PARSED_CONFIDENCE,
                      "generatedAt": "2025-03-01T12:00:00.000Z"}
    assert len(generator.calls) == 2
    assert "cache" not in store.collections
    assert generator.calls[0][1].temperature == 0.7


@pytest.mark.asyncio
async def test_chatbot_rejects_more_than_forty_messages(store, generator):
    messages = [{"role": "user", "content": "hi"}] * 41

    with pytest.raises(ValidationError):
        await ChatbotFlow(store, generator).run({"messages": messages})


@pytest.mark.asyncio
async def test_content_drafter_fallback_has_one_draft_per_platform(store, generator, clock):
    generator.queue("```json\nnot really json\n```")
    flow = ContentDrafterFlow(store, generator, clock=clock)

    result = await flow.run({"topic": "Spring launch", "platforms": ["twitter", "email", "blog"]})

    ContentPackage.model_validate(result)
    assert [d["platform"] for d in result["drafts"]] == ["twitter", "email", "blog"]
    assert all(d["characterCount"] == len(d["content"]) for d in result["drafts"])
    assert all("Spring launch" in d["content"] for d in result["drafts"])
    assert result["brief"]["headline"] == "Spring launch"
    assert result["confidence"] == FALLBACK_CONFIDENCE


@pytest.mark.asyncio
async def test_content_drafter_passes_parsed_drafts_through(store, generator, clock):
    payload = {"drafts": [{"platform": "linkedin", "content": "Hello", "hashtags": [], "characterCount": 5}],
               "brief": {"headline": "H", "keyMessages": [], "targetAudience": "A", "callToAction": "C"}}
    generator.queue(json.dumps(payload))

    result = await ContentDrafterFlow(store, generator, clock=clock).run({"topic": "Launch"})

    assert result["drafts"] == payload["drafts"]
    assert result["confidence"] == PARSED_CONFIDENCE
    assert "cache" not in store.collections


@pytest.mark.asyncio
async def test_competitor_watch_fallback_names_competitors(store, generator, clock):
    generator.queue("[]")

    result = await CompetitorWatchFlow(store, generator, clock=clock).run(
        {"checkType": "full", "competitors": ["Globex", "Initech"]}
    )

    CompetitorReport.model_validate(result)
    assert result["changes"] == []
    assert result["actionRequired"] is False
    assert "Globex, Initech" in result["summary"]
    assert "full" in result["summary"]


@pytest.mark.asyncio
async def test_unexpected_cache_write_error_still_returns_and_logs(brand_flow, store, generator, mocker, brand_json):
    generator.queue(brand_json)
    mocker.patch.object(store, "set", side_effect=RuntimeError("driver bug"))

    result = await brand_flow.run(ACME)

    assert result["confidence"] == PARSED_CONFIDENCE
    [record] = store.records("flows")
    assert record["success"] is True
    assert record["output"] == result


@pytest.mark.asyncio
async def test_unexpected_recording_error_does_not_fail_the_flow(brand_flow, store, generator, mocker, brand_json):
    generator.queue(brand_json)
    mocker.patch.object(store, "append", side_effect=RuntimeError("driver bug"))

    result = await brand_flow.run(ACME)

    assert result["valueProposition"] == "Acme Corp turns plans into shipped work."
    assert store.collections["cache"]["brand_acme_corp"]["payload"] == result
