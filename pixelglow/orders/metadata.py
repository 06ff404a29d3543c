"""
Sérialisation/désérialisation des annotations de commande et normalisation
des réponses fournisseur (PayPal payment, Stripe Checkout Session).
"""
import json
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from .models import OrderState, Provider, ProviderOrder

DEFAULT_PLAN_TYPE = "professional"
DESCRIPTION_SUFFIX = "Package - AI Headshots"
_DESCRIPTION_RE = re.compile(r"^(.*?) Package - AI Headshots$")

# module pixelglow.orders.metadata
def make_custom(
    *,
    plan_type: str,
    promo_code: Optional[str],
    original_amount: Decimal,
    final_amount: Decimal,
) -> str:
    """
    Sérialise l'annotation opaque 'custom' attachée à la transaction PayPal.
    - Jamais utilisée pour une décision de confiance (le montant renvoyé par le fournisseur fait foi).
    - Limitée à 256 caractères côté PayPal.
    """
    payload = {
        "planType": plan_type,
        "promoCode": promo_code or None,
        "originalAmount": str(original_amount),
        "finalAmount": str(final_amount),
        "discountApplied": str(original_amount - final_amount) if promo_code else "0",
    }
    return json.dumps(payload, separators=(",", ":"))[:256]

def extract_custom(transaction: Dict[str, Any]) -> Dict[str, Any]:
    """Tolérant aux erreurs: retourne {} si 'custom' absent ou JSON invalide."""
    raw = (transaction or {}).get("custom")
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}

def parse_plan_from_description(description: Optional[str]) -> Optional[str]:
    """
    "Executive Package - AI Headshots" -> "Executive".
    Heuristique best-effort (héritage), pas une garantie.
    """
    if not description:
        return None
    match = _DESCRIPTION_RE.match(description)
    return match.group(1) if match else None

def resolve_plan_type(custom: Dict[str, Any], description: Optional[str]) -> str:
    """Ordre: custom.planType, puis description, puis 'professional'."""
    from_custom = str(custom.get("planType") or "").strip()
    if from_custom:
        return from_custom
    return parse_plan_from_description(description) or DEFAULT_PLAN_TYPE

def payer_email(payer: Any) -> Optional[str]:
    """Priorité à payer.payer_info.email, puis payer.email."""
    if not isinstance(payer, dict):
        return None
    info = payer.get("payer_info") or {}
    return (info.get("email") if isinstance(info, dict) else None) or payer.get("email")

def parse_amount(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        return None

def order_from_paypal(payment: Dict[str, Any]) -> ProviderOrder:
    """Normalise une ressource PayPal /v1/payments/payment en ProviderOrder."""
    payment = payment or {}
    transaction = (payment.get("transactions") or [{}])[0] or {}
    amount = transaction.get("amount") or {}
    description = transaction.get("description")
    custom = extract_custom(transaction)
    raw_state = str(payment.get("state") or "unknown")
    return ProviderOrder(
        id=str(payment.get("id") or ""),
        provider=Provider.PAYPAL,
        raw_state=raw_state,
        state=OrderState.from_provider(raw_state),
        payer_email=payer_email(payment.get("payer")),
        amount=parse_amount(amount.get("total")),
        currency=amount.get("currency"),
        description=description,
        plan_type=resolve_plan_type(custom, description),
        custom=custom,
    )

def order_from_stripe_session(session: Dict[str, Any]) -> ProviderOrder:
    """
    Normalise une session Stripe Checkout (fournisseur historique).
    - payment_status == 'paid' est traité comme 'completed'.
    - amount_total est déjà en centimes.
    """
    session = session or {}
    meta = session.get("metadata") or {}
    payment_status = str(session.get("payment_status") or "unknown")
    state = OrderState.COMPLETED if payment_status == "paid" else OrderState.from_provider(session.get("status"))
    cents = session.get("amount_total")
    details = session.get("customer_details") or {}
    return ProviderOrder(
        id=str(session.get("id") or ""),
        provider=Provider.STRIPE,
        raw_state=payment_status,
        state=state,
        payer_email=details.get("email") or session.get("customer_email"),
        amount=(Decimal(int(cents)) / 100).quantize(Decimal("0.01")) if cents is not None else None,
        currency=(session.get("currency") or "").upper() or None,
        plan_type=str(meta.get("planType") or DEFAULT_PLAN_TYPE),
        custom=dict(meta),
    )
