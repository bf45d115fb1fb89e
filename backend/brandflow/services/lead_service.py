# /brandflow/services/lead_service.py

import logging
from typing import Any, Dict, Optional

import httpx

from brandflow.utils.metrics import lead_submissions_counter

# Forwards contact-form submissions to the external lead-processing Cloud
# Function. Fields are sent verbatim; no AI and no caching on this path.

logger = logging.getLogger(__name__)


class LeadForwardingError(Exception):
    pass


class LeadService:
    def __init__(self, client: httpx.AsyncClient, function_url: Optional[str]):
        self.client = client
        self.function_url = function_url

    async def submit(self, lead: Dict[str, Any]) -> Any:
        """Posts `{"data": lead}` and returns the callable's `result` envelope, or the raw body."""
        if not self.function_url:
            lead_submissions_counter.labels(status="not_configured").inc()
            raise LeadForwardingError("Lead function URL is not configured")

        try:
            response = await self.client.post(self.function_url, json={"data": lead})
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            lead_submissions_counter.labels(status="error").inc()
            logger.error(f"Lead submission to {self.function_url} failed: {e}")
            raise LeadForwardingError(str(e)) from e

        lead_submissions_counter.labels(status="forwarded").inc()
        if isinstance(result, dict) and result.get("result"):
            return result["result"]
        return result
