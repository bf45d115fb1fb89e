# /brandflow/routes/public.py

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest

from brandflow.config.settings import settings
from brandflow.flows.errors import PersistenceError
from brandflow.services.document_store import DocumentStore
from brandflow.utils.dependencies import get_document_store, verify_api_key

# Public endpoints that need no authentication: root, health probes, and the
# /metrics endpoint (guarded by an API key when one is configured).

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "brandflow",
        "version": "1.0.0",
        "status": "operational",
        "environment": settings.environment
    }


@router.get("/health", summary="Basic Health Check")
async def health_check():
    """Basic health check for load balancers."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc)}


@router.get("/health/ready", summary="Readiness Probe")
async def readiness_check(store: DocumentStore = Depends(get_document_store)):
    """Readiness probe: the document store must answer a ping."""
    try:
        await store.ping()
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=f"Service not ready: {e}")
    return {"status": "ready"}


@router.get("/health/live", summary="Liveness Probe")
async def liveness_check():
    """Liveness probe."""
    return {"status": "alive"}


@router.get("/metrics", tags=["Monitoring"], dependencies=[Depends(verify_api_key)])
async def metrics():
    """Prometheus metrics endpoint."""
    return PlainTextResponse(generate_latest(), media_type="text/plain")
