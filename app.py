"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.http_client import HttpClient
from infrastructure.verification.private_access_token import (
    RelayPrivateAccessTokenVerifier,
)
from infrastructure.verification.recaptcha import RecaptchaVerifier
from infrastructure.webhook.discord import DiscordContactNotifier
from routes.contact_routes import router as contact_router
from routes.health_routes import router as health_router
from services.human_verification import (
    HumanVerificationGate,
    StructlogVerificationObserver,
)
from shared.logging import setup_logging
from shared.metrics import CounterRegistry


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        # One client per external service so timeouts stay independent
        pat_http = HttpClient(timeout=settings.pat.timeout_seconds)
        recaptcha_http = HttpClient(timeout=settings.recaptcha.timeout_seconds)
        webhook_http = HttpClient()

        counters = CounterRegistry()
        app.state.settings = settings
        app.state.counters = counters
        app.state.verification_gate = HumanVerificationGate(
            settings.verification,
            pat_verifier=RelayPrivateAccessTokenVerifier(settings.pat, pat_http),
            score_verifier=RecaptchaVerifier(settings.recaptcha, recaptcha_http),
            observer=StructlogVerificationObserver(counters),
            default_minimum_score=settings.recaptcha.recaptcha_min_score,
        )
        app.state.contact_notifier = DiscordContactNotifier(
            settings.contact.contact_webhook, webhook_http
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await pat_http.aclose()
        await recaptcha_http.aclose()
        await webhook_http.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # all origins allowed with credentials support.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(contact_router)

    return app
