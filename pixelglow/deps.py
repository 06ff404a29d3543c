"""
Dépendances FastAPI: accès aux clients construits par le lifespan (app.state).
Les tests les remplacent via app.dependency_overrides.
"""
from fastapi import Request

from pixelglow.infra.paypal_client import PayPalClient
from pixelglow.infra.stripe_client import StripeLegacyClient
from pixelglow.notifications.service import Notifier


def get_paypal_client(request: Request) -> PayPalClient:
    return request.app.state.paypal_client


def get_stripe_client(request: Request) -> StripeLegacyClient:
    return request.app.state.stripe_client


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier
