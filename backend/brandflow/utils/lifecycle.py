# /brandflow/utils/lifecycle.py

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from brandflow.config.settings import Settings, settings
from brandflow.services.ai_service import build_text_generator
from brandflow.services.document_store import MongoDocumentStore
from brandflow.utils.alerting import AlertingService
from brandflow.utils.logging import setup_logging

# This file manages the application's lifespan: it builds the shared clients
# (document store, model client, outbound HTTP) once at startup, hangs them on
# app.state for the request dependencies, and closes them on shutdown.

logger = logging.getLogger(__name__)


def build_document_store(settings_obj: Settings):
    return MongoDocumentStore(settings_obj.mongo_uri)


def build_http_client(settings_obj: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings_obj.lead_timeout_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    setup_logging()

    logger.info("Application starting up...")

    document_store = build_document_store(settings)
    await document_store.create_indexes()

    http_client = build_http_client(settings)
    alerting_service = AlertingService(settings.alerting_webhook_url)

    app.state.document_store = document_store
    app.state.text_generator = build_text_generator(settings)
    app.state.http_client = http_client
    app.state.alerting_service = alerting_service

    logger.info("Application startup complete. Ready to accept requests.")

    yield  # Application is now running

    logger.info("Application shutting down...")

    await http_client.aclose()
    await alerting_service.cleanup()
    document_store.close()
