# /brandflow/utils/alerting.py

import httpx
import logging
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from brandflow.config.settings import settings

# Posts critical alerts (e.g. a flow whose model call failed) to an external
# webhook. Delivery is best-effort and never raises into the caller.

logger = logging.getLogger(__name__)

class AlertingService:
    def __init__(self, webhook_url: Optional[str], client: Optional[httpx.AsyncClient] = None):
        self.webhook_url = webhook_url
        if client is not None:
            self.client = client
        else:
            self.client = httpx.AsyncClient(timeout=5.0) if webhook_url else None

    async def send_critical_alert(self, error: str, context: Dict[str, Any]):
        if not self.client or not self.webhook_url:
            return
        try:
            alert_data = {
                "severity": "critical", "service": "brandflow",
                "error": error, "context": context,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "environment": settings.environment
            }
            await self.client.post(self.webhook_url, json=alert_data)
        except Exception as e:
            logger.error(f"Failed to send critical alert: {e}")

    async def cleanup(self):
        if self.client:
            await self.client.aclose()
