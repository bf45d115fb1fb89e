# /brandflow/services/flow_recorder.py

from typing import Any, Dict, Optional, Union

import structlog

from brandflow.config.settings import settings
from brandflow.flows.errors import PersistenceError
from brandflow.models.domain import ExecutionLogRecord
from brandflow.services.cache_service import CacheService
from brandflow.services.document_store import DocumentStore
from brandflow.utils.alerting import AlertingService
from brandflow.utils.metrics import flow_duration_histogram, flow_executions_counter

# Records the outcome of each flow invocation: refreshes the cache entry on
# success and appends an execution record either way. Telemetry failures are
# logged and swallowed; they never change what the caller receives.

log = structlog.get_logger(__name__)


class ResultRecorder:
    def __init__(
        self,
        store: DocumentStore,
        cache: Optional[CacheService] = None,
        alerting: Optional[AlertingService] = None,
        collection: Optional[str] = None,
    ):
        self.store = store
        self.cache = cache
        self.alerting = alerting
        self.collection = collection or settings.flow_log_collection

    async def record(
        self,
        flow_name: str,
        flow_input: Dict[str, Any],
        output_or_error: Union[Dict[str, Any], BaseException],
        duration_ms: int,
        success: bool,
        cache_key: Optional[str] = None,
        cached: bool = False,
    ) -> None:
        try:
            await self._record(flow_name, flow_input, output_or_error, duration_ms, success, cache_key, cached)
        except Exception as e:
            log.error("flow_record_failed", flow=flow_name, success=success, error=str(e), error_type=type(e).__name__)

    async def _record(self, flow_name, flow_input, output_or_error, duration_ms, success, cache_key, cached):
        status = "cache_hit" if cached else ("success" if success else "error")
        flow_executions_counter.labels(flow=flow_name, status=status).inc()
        flow_duration_histogram.labels(flow=flow_name).observe(duration_ms / 1000)

        if success:
            if self.cache is not None and cache_key and not cached:
                try:
                    await self.cache.store(cache_key, output_or_error, flow_input)
                except Exception as e:
                    log.error("cache_write_failed", flow=flow_name, cache_key=cache_key, error=str(e))
            record = ExecutionLogRecord(
                name=flow_name, input=flow_input, output=output_or_error,
                duration_ms=duration_ms, success=True, cached=cached,
            )
        else:
            record = ExecutionLogRecord(
                name=flow_name, input=flow_input, error=_describe(output_or_error),
                duration_ms=duration_ms, success=False,
            )
            if self.alerting is not None:
                await self.alerting.send_critical_alert(
                    record.error, {"flow": flow_name, "duration_ms": duration_ms}
                )

        await self._append(record)

    async def _append(self, record: ExecutionLogRecord) -> None:
        try:
            await self.store.append(self.collection, record.to_document(), timestamp_field="timestamp")
        except PersistenceError as e:
            log.warning("flow_log_failed", flow=record.name, success=record.success, error=str(e))


def _describe(error: Any) -> str:
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return str(error)
