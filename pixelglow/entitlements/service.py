"""
Enregistrement de l'entitlement après une capture réussie.

- Échoue fermé (Unauthenticated) sans identité liée.
- Au plus une écriture par provider_order_id: si le profil porte déjà
  paid + la même commande, rien n'est réécrit.
- planType écrit sous forme canonique (identifiant du catalogue, minuscules),
  quelle que soit la source (custom ou description).
- Un échec d'écriture (LedgerWriteFailed) ne rembourse rien: l'appelant
  le journalise comme incident opérationnel.

Fonctions synchrones (client Supabase bloquant): les appelants async passent
par run_in_threadpool.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from pixelglow.errors import Unauthenticated
from pixelglow.orders.models import ProviderOrder, to_cents
from pixelglow.pricing.catalog import get_plan
from . import repository
from .models import Entitlement, PaymentStatus

logger = logging.getLogger(__name__)

def canonical_plan_type(plan_type: Optional[str]) -> Optional[str]:
    """"Executive" -> "executive"; un plan hors catalogue est seulement mis en minuscules."""
    if not plan_type:
        return plan_type
    plan = get_plan(plan_type)
    return plan.id if plan else plan_type.strip().lower()

def build_entitlement(user_id: str, order: ProviderOrder, paid_at: datetime) -> Entitlement:
    return Entitlement(
        user_id=user_id,
        payment_status=PaymentStatus.PAID,
        amount_paid_cents=to_cents(order.amount) if order.amount is not None else 0,
        plan_type=canonical_plan_type(order.plan_type),
        provider_order_id=order.id,
        paid_at=paid_at,
    )

def record_entitlement(user_id: Optional[str], order: ProviderOrder, now: Optional[datetime] = None) -> Entitlement:
    if not user_id:
        raise Unauthenticated()

    existing = repository.get_entitlement(user_id)
    if (
        existing is not None
        and existing.payment_status == PaymentStatus.PAID
        and existing.provider_order_id == order.id
    ):
        logger.info("entitlements.record already recorded user_id=%s order_id=%s", user_id, order.id)
        return existing

    entitlement = build_entitlement(user_id, order, now or datetime.now(timezone.utc))
    repository.upsert_entitlement(entitlement)
    logger.info(
        "entitlements.record user_id=%s order_id=%s plan=%s cents=%s",
        user_id, order.id, entitlement.plan_type, entitlement.amount_paid_cents,
    )
    return entitlement
