# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""ASGI application entry point for uvicorn.

Configuration is loaded once, the store, dispatcher and orchestrator are
built once, and the same instances serve every request until shutdown.

Usage:
    uvicorn inquiry_service.server:create_server_app --factory --host 0.0.0.0 --port 8000

Environment variables:
    See :mod:`inquiry_service.config_loader`.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI

from .api import create_app
from .config_loader import ServiceConfig, load_settings
from .dispatcher import NotificationDispatcher
from .logger import configure_logging, get_logger
from .orchestrator import SubmissionOrchestrator
from .prometheus import SubmissionMetrics
from .store import InquiryStore

logger = get_logger("InquiryServer")


@dataclass
class Services:
    """The process-wide resources of one running service."""

    settings: ServiceConfig
    store: InquiryStore
    dispatcher: NotificationDispatcher
    orchestrator: SubmissionOrchestrator
    metrics: SubmissionMetrics


def build_services(settings: ServiceConfig) -> Services:
    """Construct every pipeline component from ``settings``.

    Missing mail settings yield a dispatcher in degraded mode; a missing
    ``DATABASE_URL`` is fatal.

    Raises:
        ConfigError: If ``DATABASE_URL`` is not set.
    """
    store = InquiryStore.from_url(
        settings.require_database_url(),
        pool_size=settings.pool_size,
        pool_timeout=settings.pool_timeout,
    )
    dispatcher = NotificationDispatcher(settings.mail)
    metrics = SubmissionMetrics()
    metrics.set_mail_enabled(dispatcher.enabled)
    orchestrator = SubmissionOrchestrator(store, dispatcher, metrics=metrics)
    return Services(settings, store, dispatcher, orchestrator, metrics)


def create_server_app(settings: ServiceConfig | None = None) -> FastAPI:
    """Build the configured FastAPI application.

    Args:
        settings: Resolved configuration; loaded with :func:`load_settings`
            when omitted.
    """
    if settings is None:
        settings = load_settings()
        configure_logging(settings.log_level)
    services = build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open storage on startup and release it on shutdown."""
        await services.store.init_db()
        logger.info(
            "Inquiry service ready (mail %s)",
            "enabled" if services.dispatcher.enabled else "disabled",
        )
        try:
            yield
        finally:
            await services.store.close()

    return create_app(
        services.orchestrator,
        services.store,
        metrics=services.metrics,
        api_token=settings.api_token,
        lifespan=lifespan,
    )
