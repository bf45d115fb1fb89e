# /brandflow/routes/leads.py

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from brandflow.config.settings import settings
from brandflow.models.api import LeadSubmission
from brandflow.services.lead_service import LeadForwardingError, LeadService
from brandflow.utils.dependencies import get_lead_service
from brandflow.utils.rate_limiter import limiter

# Contact-form submissions. The body is forwarded to the lead-processing
# function unchanged; this route adds nothing but rate limiting.

router = APIRouter(tags=["Leads"])

log = structlog.get_logger(__name__)


@router.post("/leads/submit")
@limiter.limit(f"{settings.lead_rate_limit_per_minute}/minute")
async def submit_lead(
    request: Request,
    lead: LeadSubmission,
    lead_service: LeadService = Depends(get_lead_service),
):
    try:
        result = await lead_service.submit(lead.model_dump(exclude_none=True))
    except LeadForwardingError as e:
        log.error("lead_submission_failed", source=lead.source, error=str(e))
        return JSONResponse({"success": False, "error": "Failed to submit lead"}, status_code=500)

    log.info("lead_submitted", source=lead.source)
    return JSONResponse(result, status_code=200)
