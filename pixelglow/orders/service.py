"""
Cas d'usage 'orders': orchestre pricing, passerelle PayPal, journal des
captures et entitlement.

Ordre de la capture:
  1) validation des champs puis identité (Unauthenticated avant tout débit)
  2) gardes d'idempotence, sans appel fournisseur si l'une répond:
     - journal des captures: commande déjà terminale -> résultat stocké
     - profil utilisateur portant déjà cette commande (paid) -> succès rejoué
     une garde illisible lève LedgerUnavailable (503): pas d'execute à l'aveugle
  3) execute chez PayPal (une fois)
  4) enregistrement de la capture puis de l'entitlement
     (LedgerWriteFailed journalisé en critique, l'achat reste un succès)

Les repositories Supabase sont synchrones: appelés via run_in_threadpool.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from pixelglow.entitlements import repository as entitlements_repository
from pixelglow.entitlements import service as entitlements_service
from pixelglow.entitlements.models import Entitlement, PaymentStatus
from pixelglow.errors import LedgerWriteFailed, OrderOwnershipMismatch, Unauthenticated, ValidationError
from pixelglow.infra.paypal_client import PayPalClient
from pixelglow.pricing.catalog import CENT, CURRENCY
from pixelglow.pricing.service import PriceQuote, resolve_price
from . import gateway, repository
from .models import (
    Captured,
    CaptureRecord,
    CaptureResult,
    CreatedOrder,
    OrderState,
    PaymentNotCompleted,
    ProviderOrder,
    TERMINAL_STATES,
)

logger = logging.getLogger(__name__)

# module pixelglow.orders.service
def quote_for_checkout(plan_type: str, amount: Decimal, promo_code: Optional[str] = None) -> PriceQuote:
    """
    Recalcule le prix côté serveur et refuse un montant client divergent.
    Un code promo inconnu n'est pas bloquant (prix plein).
    """
    quote = resolve_price(plan_type, promo_code)
    if Decimal(amount).quantize(CENT) != quote.final_amount:
        raise ValidationError(
            f"Amount {Decimal(amount):.2f} does not match the price of the {quote.plan.id} plan ({quote.final_amount:.2f})"
        )
    return quote

async def create_checkout_order(
    paypal: PayPalClient,
    *,
    plan_type: str,
    amount: Decimal,
    promo_code: Optional[str] = None,
) -> CreatedOrder:
    quote = quote_for_checkout(plan_type, amount, promo_code)
    if quote.warning:
        logger.info("orders.service.create_checkout_order %s", quote.warning)
    return await gateway.create_order(paypal, quote)

def _order_from_record(record: CaptureRecord) -> ProviderOrder:
    return ProviderOrder(
        id=record.provider_order_id,
        provider=record.provider,
        raw_state=record.status,
        state=OrderState.from_provider(record.status),
        payer_email=record.payer_email,
        amount=record.amount,
        currency=record.currency,
        plan_type=record.plan_type or "professional",
    )

def _order_from_entitlement(entitlement: Entitlement) -> ProviderOrder:
    # Le profil ne garde ni l'état brut ni l'e-mail du payeur: seul le succès est connu
    return ProviderOrder(
        id=entitlement.provider_order_id,
        raw_state=OrderState.APPROVED.value,
        state=OrderState.APPROVED,
        amount=(Decimal(entitlement.amount_paid_cents) / 100).quantize(CENT),
        currency=CURRENCY,
        plan_type=entitlement.plan_type or "professional",
    )

def _record_from_result(result: CaptureResult, user_id: str, now: datetime) -> CaptureRecord:
    if isinstance(result, Captured):
        order = result.order
        return CaptureRecord(
            provider_order_id=order.id,
            user_id=user_id,
            provider=order.provider,
            status=order.raw_state,
            state=OrderState.CAPTURED,
            payer_email=order.payer_email,
            amount=order.amount,
            currency=order.currency,
            plan_type=order.plan_type,
            captured_at=now,
        )
    return CaptureRecord(
        provider_order_id=result.order_id,
        user_id=user_id,
        status=result.status,
        state=OrderState.from_provider(result.status),
        captured_at=now,
    )

async def _record_entitlement(user_id: str, order: ProviderOrder) -> None:
    try:
        await run_in_threadpool(entitlements_service.record_entitlement, user_id, order)
    except LedgerWriteFailed as e:
        # L'argent a bougé: pas de remboursement automatique, réconciliation hors bande
        logger.critical(
            "LEDGER_WRITE_FAILED user_id=%s order_id=%s amount=%s plan=%s diagnostic=%s",
            user_id, order.id, order.amount, order.plan_type, e.diagnostic,
        )

async def _replay(record: CaptureRecord, user_id: str) -> CaptureResult:
    if record.user_id != user_id:
        raise OrderOwnershipMismatch()
    if record.state == OrderState.CAPTURED:
        order = _order_from_record(record)
        # Chemin de reprise: réécrit l'entitlement seulement s'il manque
        await _record_entitlement(user_id, order)
        return Captured(order=order, replayed=True)
    return PaymentNotCompleted(order_id=record.provider_order_id, status=record.status, replayed=True)

async def _replay_from_entitlement(entitlement: Entitlement, user_id: str, now: datetime) -> Captured:
    if entitlement.user_id != user_id:
        raise OrderOwnershipMismatch()
    order = _order_from_entitlement(entitlement)
    # Journal des captures manquant: on le reconstitue depuis le profil
    await run_in_threadpool(repository.save_capture, _record_from_result(Captured(order=order), user_id, now))
    return Captured(order=order, replayed=True)

async def capture_and_record(
    paypal: PayPalClient,
    *,
    order_id: str,
    payer_id: str,
    user: Optional[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> CaptureResult:
    order_id = (order_id or "").strip()
    payer_id = (payer_id or "").strip()
    if not order_id or not payer_id:
        raise ValidationError("Missing orderID or payerID")

    user_id = str((user or {}).get("id") or "")
    if not user_id:
        raise Unauthenticated()
    now = now or datetime.now(timezone.utc)

    # Gardes d'idempotence: une lecture impossible lève LedgerUnavailable, jamais d'execute à l'aveugle
    stored = await run_in_threadpool(repository.get_capture, order_id)
    if stored is not None and stored.is_terminal:
        logger.info("orders.service.capture replay order_id=%s state=%s", order_id, stored.state.value)
        return await _replay(stored, user_id)

    recorded = await run_in_threadpool(entitlements_repository.find_by_order_id, order_id)
    if recorded is not None and recorded.payment_status == PaymentStatus.PAID:
        logger.warning("orders.service.capture replay from entitlement order_id=%s (capture log missing)", order_id)
        return await _replay_from_entitlement(recorded, user_id, now)

    result = await gateway.capture_order(paypal, order_id, payer_id)

    if isinstance(result, PaymentNotCompleted):
        if OrderState.from_provider(result.status) in TERMINAL_STATES:
            await run_in_threadpool(repository.save_capture, _record_from_result(result, user_id, now))
        return result

    if not await run_in_threadpool(repository.save_capture, _record_from_result(result, user_id, now)):
        logger.warning("orders.service.capture capture log not written order_id=%s, entitlement row is the only guard", order_id)
    await _record_entitlement(user_id, result.order)
    logger.info(
        "orders.service.capture captured order_id=%s user_id=%s amount=%s plan=%s",
        result.order.id, user_id, result.order.amount, result.order.plan_type,
    )
    return result
