# /brandflow/routes/flows.py

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from brandflow.config.settings import settings
from brandflow.flows.brand_positioning import BrandPositioningFlow
from brandflow.flows.chatbot import ChatbotFlow
from brandflow.flows.competitor_watch import CompetitorWatchFlow
from brandflow.flows.content_drafter import ContentDrafterFlow
from brandflow.models.api import (
    APIResponse, BrandInput, ChatbotInput, CompetitorWatchInput, ContentDraftInput, ErrorResponse,
)
from brandflow.services.document_store import DocumentStore
from brandflow.utils.dependencies import (
    get_brand_positioning_flow,
    get_chatbot_flow,
    get_competitor_watch_flow,
    get_content_drafter_flow,
    get_document_store,
    verify_api_key,
)

# HTTP entry points for the AI flows. Each endpoint returns the flow output
# JSON as-is; failures are turned into JSON error bodies by the exception
# handlers registered in main.py.

router = APIRouter(tags=["AI Flows"])

FLOW_ERRORS = {
    422: {"model": ErrorResponse, "description": "Malformed flow input"},
    502: {"model": ErrorResponse, "description": "Text generation failed"},
}


@router.post("/flows/brand-positioning", responses=FLOW_ERRORS)
async def run_brand_positioning(
    body: BrandInput,
    flow: BrandPositioningFlow = Depends(get_brand_positioning_flow),
) -> Dict[str, Any]:
    """Brand positioning for a company; served from cache for 7 days per company name."""
    return await flow.run(body)


@router.post("/flows/content-drafter", responses=FLOW_ERRORS)
async def run_content_drafter(
    body: ContentDraftInput,
    flow: ContentDrafterFlow = Depends(get_content_drafter_flow),
) -> Dict[str, Any]:
    return await flow.run(body)


@router.post("/flows/competitor-watch", responses=FLOW_ERRORS)
async def run_competitor_watch(
    body: CompetitorWatchInput,
    flow: CompetitorWatchFlow = Depends(get_competitor_watch_flow),
) -> Dict[str, Any]:
    return await flow.run(body)


@router.post("/chat", responses=FLOW_ERRORS)
async def chat(
    body: ChatbotInput,
    flow: ChatbotFlow = Depends(get_chatbot_flow),
) -> Dict[str, Any]:
    return await flow.run(body)


@router.get("/flows/executions", response_model=APIResponse, dependencies=[Depends(verify_api_key)])
async def list_flow_executions(
    limit: int = Query(20, ge=1, le=100),
    store: DocumentStore = Depends(get_document_store),
):
    """Most recent execution records, newest first, for the dashboard."""
    executions = await store.find_recent(settings.flow_log_collection, limit=limit)
    return APIResponse(
        success=True,
        message="Flow executions retrieved successfully.",
        data={"executions": executions},
        version=settings.api_version,
    )
