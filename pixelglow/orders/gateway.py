"""
Passerelles fournisseur: création et capture (execute) d'une commande PayPal.

Les erreurs du client PayPal sont converties ici en erreurs typées
(ProviderCreateFailed / ProviderCaptureFailed / ProviderUnavailable); aucune
exception brute du client ne franchit cette frontière.
"""
import logging
from typing import Any, Dict, Optional

from pixelglow import config
from pixelglow.errors import ProviderCaptureFailed, ProviderCreateFailed, ProviderUnavailable
from pixelglow.infra.paypal_client import PayPalAPIError, PayPalClient, PayPalUnavailable
from pixelglow.pricing.service import PriceQuote
from . import metadata as meta
from .models import Captured, CaptureResult, CreatedOrder, PaymentNotCompleted

logger = logging.getLogger(__name__)

# module pixelglow.orders.gateway
def build_payment_request(quote: PriceQuote, *, return_url: str, cancel_url: str) -> Dict[str, Any]:
    """
    Construit le corps PayPal: une seule ligne, total = montant résolu, devise USD.
    - name: "<plan> plan" (+ " (<pct>% off with <CODE>)" si remise)
    - sku: "<plan>" ou "<plan>_<CODE>"
    - description: "<PlanName> Package - AI Headshots" (relue à la capture)
    - custom: annotations opaques (plan, promo, montants)
    """
    plan = quote.plan
    code = quote.applied_code.code if quote.applied_code else None
    total = f"{quote.final_amount:.2f}"

    item_name = f"{plan.id} plan"
    if code:
        item_name += f" ({quote.applied_code.discount_percent}% off with {code})"

    return {
        "intent": "sale",
        "payer": {"payment_method": "paypal"},
        "redirect_urls": {"return_url": return_url, "cancel_url": cancel_url},
        "transactions": [
            {
                "item_list": {
                    "items": [
                        {
                            "name": item_name,
                            "sku": f"{plan.id}_{code}" if code else plan.id,
                            "price": total,
                            "currency": quote.currency,
                            "quantity": 1,
                        }
                    ]
                },
                "amount": {"currency": quote.currency, "total": total},
                "description": f"{plan.name} {meta.DESCRIPTION_SUFFIX}",
                "custom": meta.make_custom(
                    plan_type=plan.id,
                    promo_code=code,
                    original_amount=quote.original_amount,
                    final_amount=quote.final_amount,
                ),
            }
        ],
    }

def approval_url(payment: Dict[str, Any]) -> Optional[str]:
    for link in (payment or {}).get("links") or []:
        if link.get("rel") == "approval_url":
            return link.get("href")
    return None

async def create_order(
    paypal: PayPalClient,
    quote: PriceQuote,
    *,
    return_url: Optional[str] = None,
    cancel_url: Optional[str] = None,
) -> CreatedOrder:
    """
    Ouvre une commande PayPal. Jamais réessayée automatiquement: une nouvelle
    soumission crée une nouvelle commande (sans conséquence tant qu'elle n'est pas capturée).
    """
    body = build_payment_request(
        quote,
        return_url=return_url or f"{config.BASE_URL}{config.CHECKOUT_RETURN_PATH}",
        cancel_url=cancel_url or f"{config.BASE_URL}{config.CHECKOUT_CANCEL_PATH}",
    )
    try:
        payment = await paypal.create_payment(body)
    except PayPalUnavailable as e:
        raise ProviderUnavailable(diagnostic=str(e)) from e
    except PayPalAPIError as e:
        logger.error("orders.gateway.create_order rejected status=%s payload=%s", e.status_code, e.payload)
        raise ProviderCreateFailed(diagnostic=e.payload) from e

    url = approval_url(payment)
    order_id = payment.get("id")
    if not url or not order_id:
        logger.error("orders.gateway.create_order approval_url missing payment_id=%s", order_id)
        raise ProviderCreateFailed("Approval URL not found in PayPal response", diagnostic=payment)

    logger.info("orders.gateway.create_order created id=%s plan=%s total=%s", order_id, quote.plan.id, quote.final_amount)
    return CreatedOrder(provider_order_id=order_id, approval_url=url)

async def capture_order(paypal: PayPalClient, order_id: str, payer_id: str) -> CaptureResult:
    """
    Exécute la commande chez PayPal (une seule fois par appel).
    - approved/completed -> Captured(order)
    - tout autre état -> PaymentNotCompleted(status=<état brut>), pas une exception
    """
    try:
        payment = await paypal.execute_payment(order_id, payer_id)
    except PayPalUnavailable as e:
        raise ProviderUnavailable(diagnostic=str(e)) from e
    except PayPalAPIError as e:
        logger.error("orders.gateway.capture_order failed id=%s status=%s payload=%s", order_id, e.status_code, e.payload)
        raise ProviderCaptureFailed(diagnostic=e.payload) from e

    order = meta.order_from_paypal(payment)
    if not order.is_success:
        logger.info("orders.gateway.capture_order not completed id=%s state=%s", order_id, order.raw_state)
        return PaymentNotCompleted(order_id=order.id or order_id, status=order.raw_state)
    if not order.id:
        raise ProviderCaptureFailed("PayPal order ID is undefined", diagnostic=payment)
    return Captured(order=order)
