"""
Vérification en lecture seule de l'état d'une commande (page post-checkout).

Ne modifie rien: aucun execute chez le fournisseur, aucune écriture
d'entitlement. Peut être appelée autant de fois que nécessaire.
"""
import logging
from typing import Optional

import stripe

from pixelglow.errors import ProviderLookupFailed, ProviderUnavailable
from pixelglow.infra.paypal_client import PayPalAPIError, PayPalClient, PayPalUnavailable
from pixelglow.infra.stripe_client import StripeLegacyClient
from . import metadata as meta
from .models import Provider, ProviderOrder, VerificationDetails, VerificationResult
from .routing import resolve_identifier

logger = logging.getLogger(__name__)

def to_verification(order: ProviderOrder) -> VerificationResult:
    return VerificationResult(
        success=order.is_success,
        status=order.raw_state or "unknown",
        details=VerificationDetails(
            id=order.id or None,
            payer=order.payer_email,
            amount_total=order.amount_cents,
            currency=order.currency,
            payment_status=order.raw_state or "unknown",
        ),
    )

async def _fetch_paypal(paypal: PayPalClient, order_id: str) -> ProviderOrder:
    try:
        payment = await paypal.get_payment(order_id)
    except PayPalUnavailable as e:
        raise ProviderUnavailable(diagnostic=str(e)) from e
    except PayPalAPIError as e:
        logger.error("orders.verifier paypal lookup failed id=%s status=%s payload=%s", order_id, e.status_code, e.payload)
        raise ProviderLookupFailed("Failed to retrieve PayPal payment", diagnostic=e.payload) from e
    return meta.order_from_paypal(payment)

async def _fetch_stripe(stripe_client: StripeLegacyClient, session_id: str) -> ProviderOrder:
    try:
        session = await stripe_client.get_session(session_id)
    except stripe.APIConnectionError as e:
        raise ProviderUnavailable(diagnostic=str(e)) from e
    except stripe.StripeError as e:
        logger.error("orders.verifier stripe lookup failed id=%s: %s", session_id, e)
        raise ProviderLookupFailed("Failed to retrieve Stripe session", diagnostic=str(e)) from e
    except RuntimeError as e:
        logger.error("orders.verifier stripe not configured id=%s", session_id)
        raise ProviderLookupFailed("Failed to retrieve Stripe session", diagnostic=str(e)) from e
    return meta.order_from_stripe_session(session)

async def verify_order(
    identifier: str,
    *,
    paypal: PayPalClient,
    stripe_client: StripeLegacyClient,
    provider: Optional[str] = None,
) -> VerificationResult:
    """Aiguille vers le bon fournisseur selon l'identifiant puis normalise l'état."""
    target, order_id = resolve_identifier(identifier, provider)
    if target == Provider.STRIPE:
        order = await _fetch_stripe(stripe_client, order_id)
    else:
        order = await _fetch_paypal(paypal, order_id)
    logger.info("orders.verifier provider=%s id=%s state=%s", target.value, order_id, order.raw_state)
    return to_verification(order)
