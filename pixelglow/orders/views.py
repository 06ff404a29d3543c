import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from pixelglow.deps import get_notifier, get_paypal_client, get_stripe_client
from pixelglow.infra.paypal_client import PayPalClient
from pixelglow.infra.stripe_client import StripeLegacyClient
from pixelglow.notifications.service import Notifier
from pixelglow.pricing.catalog import get_plan
from pixelglow.utils.rate_limit import optional_rate_limit
from pixelglow.utils.security import get_optional_user
from . import service as orders_service
from . import verifier
from .models import PaymentNotCompleted, ProviderOrder

logger = logging.getLogger(__name__)
paypal_router = APIRouter(prefix="/api/v1/paypal", tags=["PayPal API"])
orders_router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan_type: str = Field(alias="planType", min_length=1)
    amount: Decimal = Field(gt=0)
    promo_code: Optional[str] = Field(default=None, alias="promoCode")
    # Informatif: le prix d'origine est recalculé côté serveur
    original_amount: Optional[Decimal] = Field(default=None, alias="originalAmount")


class CaptureOrderRequest(BaseModel):
    order_id: str = Field(alias="orderID", min_length=1)
    payer_id: str = Field(alias="payerID", min_length=1)


def _receipt_data(order: ProviderOrder) -> Dict[str, Any]:
    plan = get_plan(order.plan_type)
    data: Dict[str, Any] = {
        "planName": plan.name if plan else order.plan_type,
        "amount": f"${order.amount:.2f}" if order.amount is not None else None,
    }
    if plan:
        headshots = next((f.split()[0] for f in plan.features if f.endswith("headshots")), None)
        if headshots:
            data["headshots"] = headshots
    return data

# module pixelglow.orders.views
@paypal_router.post("/create-order", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_order(body: CreateOrderRequest, paypal: PayPalClient = Depends(get_paypal_client)):
    """
    Ouvre une commande PayPal pour le plan choisi.
    - Entrée JSON: {planType, amount, promoCode?, originalAmount?}
    - Le prix est recalculé côté serveur (400 si amount diverge)
    - Réponse: {approvalUrl, id}; le front redirige vers approvalUrl
    - Erreurs: {error, details?} (400 validation, 500 refus PayPal, 503 PayPal injoignable)
    """
    created = await orders_service.create_checkout_order(
        paypal,
        plan_type=body.plan_type,
        amount=body.amount,
        promo_code=body.promo_code,
    )
    return {"approvalUrl": created.approval_url, "id": created.provider_order_id}

@paypal_router.post("/capture-order", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def capture_order(
    body: CaptureOrderRequest,
    background_tasks: BackgroundTasks,
    user: Optional[dict] = Depends(get_optional_user),
    paypal: PayPalClient = Depends(get_paypal_client),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Exécute la commande après approbation puis enregistre le plan payé.
    - Identité obligatoire (401 sinon, avant tout appel PayPal)
    - Seconde capture d'une commande terminale: résultat stocké, pas de nouvel execute
    - Paiement non abouti: 400 {error: "Payment not completed", status}
    - E-mail de reçu planifié en tâche de fond, sans effet sur la réponse
    """
    result = await orders_service.capture_and_record(
        paypal,
        order_id=body.order_id,
        payer_id=body.payer_id,
        user=user,
    )
    if isinstance(result, PaymentNotCompleted):
        return JSONResponse(status_code=400, content={"error": "Payment not completed", "status": result.status})

    order = result.order
    if not result.replayed:
        recipient = order.payer_email or (user or {}).get("email")
        background_tasks.add_task(notifier.dispatch_notification, recipient, "payment_success", _receipt_data(order))
    return {
        "success": True,
        "orderID": order.id,
        "status": order.raw_state,
        "payerEmail": order.payer_email,
        "amount": f"{order.amount:.2f}" if order.amount is not None else None,
        "planType": order.plan_type,
    }

@orders_router.get("/verify")
async def verify_order(
    order_id: str = Query(alias="orderId"),
    provider: Optional[str] = Query(default=None),
    paypal: PayPalClient = Depends(get_paypal_client),
    stripe_client: StripeLegacyClient = Depends(get_stripe_client),
):
    """
    Vérification en lecture seule pour la page post-checkout.
    - orderId: identifiant PayPal (PAYID-...), session Stripe historique (cs_...)
      ou forme préfixée explicite (paypal:<id>, stripe:<id>)
    - Réponse: {success, status, details: {id, payer, amount_total, currency, payment_status}}
    - N'écrit jamais d'entitlement
    """
    result = await verifier.verify_order(order_id, paypal=paypal, stripe_client=stripe_client, provider=provider)
    return result.model_dump()
