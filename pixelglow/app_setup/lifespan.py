"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Construit les clients fournisseurs à partir de la configuration (PayPal, Stripe
  historique, Resend) et les expose sur app.state (injectés via pixelglow.deps).
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
- Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement le rate limiting (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l'init échoue
"""
import logging
import os
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from pixelglow import config
from pixelglow.infra.paypal_client import PayPalClient, PayPalSettings
from pixelglow.infra.resend_client import ResendClient
from pixelglow.infra.stripe_client import StripeLegacyClient
from pixelglow.notifications.service import Notifier

async def init_rate_limiter(app: FastAPI) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d'échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    """
    logger = logging.getLogger("uvicorn.error")
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            from fakeredis.aioredis import FakeRedis
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            r = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning(f"Rate limiting falling back to local in-memory due to init error: {e}")
        else:
            app.state.rate_limit_enabled = False
            logger.warning(f"Rate limiting disabled due to init error: {e}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")

    paypal_settings = PayPalSettings.from_config()
    if not paypal_settings.configured:
        logger.warning("PAYPAL_CLIENT_ID / PAYPAL_CLIENT_SECRET missing: PayPal calls will be rejected")
    app.state.paypal_client = PayPalClient(paypal_settings)
    app.state.stripe_client = StripeLegacyClient(config.STRIPE_SECRET_KEY)
    app.state.notifier = Notifier(ResendClient(config.RESEND_API_KEY))
    logger.info("Checkout providers ready paypal_mode=%s stripe_legacy=%s", paypal_settings.mode, app.state.stripe_client.configured)

    await init_rate_limiter(app)
    try:
        yield
    finally:
        await app.state.paypal_client.aclose()
