# /brandflow/utils/dependencies.py

import secrets
from typing import Callable, Type, TypeVar

import structlog
from fastapi import Depends, HTTPException, Request

from brandflow.config.settings import settings
from brandflow.flows.base import CachedGenerationFlow
from brandflow.flows.brand_positioning import BrandPositioningFlow
from brandflow.flows.chatbot import ChatbotFlow
from brandflow.flows.competitor_watch import CompetitorWatchFlow
from brandflow.flows.content_drafter import ContentDrafterFlow
from brandflow.services.ai_service import TextGenerator
from brandflow.services.document_store import DocumentStore
from brandflow.services.lead_service import LeadService
from brandflow.utils.alerting import AlertingService

# Request-scoped dependency providers. Long-lived clients are created once in
# the lifespan and kept on app.state; flows are built per request from them.

log = structlog.get_logger(__name__)

FlowT = TypeVar("FlowT", bound=CachedGenerationFlow)


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_text_generator(request: Request) -> TextGenerator:
    return request.app.state.text_generator


def get_alerting_service(request: Request) -> AlertingService:
    return request.app.state.alerting_service


def get_lead_service(request: Request) -> LeadService:
    return LeadService(request.app.state.http_client, settings.lead_function_url)


def _flow_provider(flow_cls: Type[FlowT]) -> Callable[..., FlowT]:
    def provide(
        store: DocumentStore = Depends(get_document_store),
        generator: TextGenerator = Depends(get_text_generator),
        alerting: AlertingService = Depends(get_alerting_service),
    ) -> FlowT:
        return flow_cls(store, generator, alerting=alerting)

    provide.__name__ = f"get_{flow_cls.__name__}"
    return provide


get_brand_positioning_flow = _flow_provider(BrandPositioningFlow)
get_chatbot_flow = _flow_provider(ChatbotFlow)
get_content_drafter_flow = _flow_provider(ContentDrafterFlow)
get_competitor_watch_flow = _flow_provider(CompetitorWatchFlow)


async def verify_api_key(request: Request):
    """Guards operational endpoints when API_KEY is configured."""
    if settings.api_key:
        provided_key = request.headers.get("X-API-KEY")
        if not (provided_key and secrets.compare_digest(provided_key, settings.api_key)):
            log.warning("api_key_rejected", path=request.url.path)
            raise HTTPException(status_code=403, detail="Invalid or missing API key")
