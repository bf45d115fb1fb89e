# /brandflow/main.py

import os
import time
import uvicorn
import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from brandflow.config.settings import settings
from brandflow.flows.errors import FlowError, GenerationError, ValidationError
from brandflow.utils.lifecycle import lifespan
from brandflow.utils.metrics import response_time_histogram
from brandflow.utils.rate_limiter import limiter
from brandflow.routes import flows, leads, public

log = structlog.get_logger(__name__)

app = FastAPI(
    title="brandflow",
    version="1.0.0",
    description="AI marketing flows: brand positioning, content drafting, competitor watch and chat",
    lifespan=lifespan,
    openapi_url=f"/api/{settings.api_version}/openapi.json" if settings.environment != "production" else None,
    docs_url=f"/api/{settings.api_version}/docs" if settings.environment != "production" else None,
    redoc_url=f"/api/{settings.api_version}/redoc" if settings.environment != "production" else None,
)

# --- Rate Limiting ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# --- Flow Errors ---
# Upstream detail is logged, never returned to the caller.
@app.exception_handler(ValidationError)
async def flow_validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        {"success": False, "error": str(exc), "details": jsonable_encoder(exc.errors)},
        status_code=422,
    )


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    log.error("generation_failed", path=request.url.path, error=str(exc))
    return JSONResponse({"success": False, "error": "Flow execution failed"}, status_code=502)


@app.exception_handler(FlowError)
async def flow_error_handler(request: Request, exc: FlowError):
    log.error("flow_failed", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
    return JSONResponse({"success": False, "error": "Flow execution failed"}, status_code=500)


# --- Middleware ---
cors_origins = [origin.strip() for origin in settings.cors_allowed_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.environment != "test":
    allowed_hosts = [host.strip() for host in settings.allowed_hosts.split(",") if host.strip()]
    if allowed_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SlowAPIMiddleware)


@app.middleware("http")
async def performance_middleware(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response_time_histogram.labels(endpoint=request.url.path).observe(process_time)
    response.headers["X-Process-Time"] = str(process_time)
    return response


# --- API Routers ---
app.include_router(public.router)
app.include_router(flows.router, prefix=f"/api/{settings.api_version}")
app.include_router(leads.router, prefix=f"/api/{settings.api_version}")

# --- Main Entry Point for Uvicorn (for local development) ---
if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "127.0.0.1")

    uvicorn.run(
        "brandflow.main:app",
        host=host,
        port=port,
        reload=True if settings.environment == "development" else False,
        workers=settings.workers if settings.environment == "production" else 1
    )
