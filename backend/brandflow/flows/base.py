# /brandflow/flows/base.py

import time
from datetime import datetime, timedelta
from typing import Any, Callable, ClassVar, Dict, Generic, Mapping, Optional, Type, TypeVar, Union

import pydantic
import structlog

from brandflow.flows.errors import ValidationError
from brandflow.models.api import FlowInput
from brandflow.services.ai_service import GenerationParams, TextGenerator
from brandflow.services.cache_service import CacheService, make_cache_key, utcnow
from brandflow.services.document_store import DocumentStore
from brandflow.services.flow_recorder import ResultRecorder
from brandflow.services.response_parser import iso_timestamp
from brandflow.utils.alerting import AlertingService

log = structlog.get_logger(__name__)

InputT = TypeVar("InputT", bound=FlowInput)


class CachedGenerationFlow(Generic[InputT]):
    """
    Shared orchestration for every AI flow:

        validate -> cache lookup -> build prompt -> generate -> parse -> record

    Subclasses provide the prompt builder and the response parser. Flows with a
    `cache_ttl` also name the input field that identifies the cached entity.

    Dependencies are passed in explicitly so tests can run a flow against
    in-memory fakes. A flow instance is request-scoped and holds no state
    between invocations.
    """

    name: ClassVar[str]
    input_model: ClassVar[Type[FlowInput]]
    generation_params: ClassVar[GenerationParams]
    cache_ttl: ClassVar[Optional[timedelta]] = None
    cache_prefix: ClassVar[Optional[str]] = None
    cache_key_field: ClassVar[Optional[str]] = None

    def __init__(
        self,
        store: DocumentStore,
        generator: TextGenerator,
        alerting: Optional[AlertingService] = None,
        clock: Callable[[], datetime] = utcnow,
        cache_ttl: Optional[timedelta] = None,
    ):
        self.store = store
        self.generator = generator
        self.clock = clock
        ttl = cache_ttl or self.cache_ttl
        self.cache = CacheService(store, ttl, clock=clock) if ttl else None
        self.recorder = ResultRecorder(store, cache=self.cache, alerting=alerting)

    # ---- hooks ----

    def build_prompt(self, flow_input: InputT) -> str:
        raise NotImplementedError

    def parse_response(self, raw_text: str, flow_input: InputT) -> Dict[str, Any]:
        raise NotImplementedError

    # ---- helpers ----

    def now_iso(self) -> str:
        return iso_timestamp(self.clock())

    def validate_input(self, raw_input: Union[InputT, Mapping[str, Any]]) -> InputT:
        if isinstance(raw_input, self.input_model):
            return raw_input
        try:
            return self.input_model.model_validate(raw_input)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid input for {self.name}", errors=e.errors(include_url=False)) from e

    def cache_key(self, flow_input: InputT) -> Optional[str]:
        if self.cache is None or not self.cache_prefix or not self.cache_key_field:
            return None
        return make_cache_key(self.cache_prefix, getattr(flow_input, self.cache_key_field))

    # ---- orchestration ----

    async def run(self, raw_input: Union[InputT, Mapping[str, Any]]) -> Dict[str, Any]:
        flow_input = self.validate_input(raw_input)
        input_document = flow_input.model_dump(by_alias=True, exclude_none=True)
        key = self.cache_key(flow_input)
        start_time = time.monotonic()

        try:
            if key is not None:
                entry = await self.cache.lookup(key)
                if entry is not None:
                    log.info("cache_hit", flow=self.name, cache_key=key)
                    await self.recorder.record(
                        self.name, input_document, entry.payload, _elapsed_ms(start_time),
                        success=True, cached=True,
                    )
                    return entry.payload

            prompt = self.build_prompt(flow_input)
            raw_text = await self.generator.generate(prompt, self.generation_params)
            output = self.parse_response(raw_text, flow_input)
        except Exception as e:
            duration_ms = _elapsed_ms(start_time)
            await self.recorder.record(self.name, input_document, e, duration_ms, success=False)
            log.error("flow_error", flow=self.name, step="generate", details=str(e), duration_ms=duration_ms)
            raise

        duration_ms = _elapsed_ms(start_time)
        await self.recorder.record(self.name, input_document, output, duration_ms, success=True, cache_key=key)
        log.info("flow_success", flow=self.name, duration_ms=duration_ms, confidence=output.get("confidence"))
        return output


def _elapsed_ms(start_time: float) -> int:
    return int((time.monotonic() - start_time) * 1000)
