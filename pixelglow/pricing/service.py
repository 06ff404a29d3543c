"""
Résolution du prix d'un plan avec code promo optionnel (fonction pure).

- Plan inconnu: InvalidPlan (bloquant).
- Code promo inconnu: NON bloquant, prix plein + avertissement
  (outcome=unknown_promo) pour que le front affiche l'erreur sans échouer l'achat.
"""
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from pixelglow.errors import InvalidPlan
from .catalog import CENT, CURRENCY, Plan, PromoCode, find_promo, get_plan

MIN_AMOUNT = Decimal("0.01")


class PromoOutcome(str, Enum):
    NO_PROMO = "no_promo"
    APPLIED_DISCOUNT = "applied_discount"
    UNKNOWN_PROMO = "unknown_promo"


class PriceQuote(BaseModel):
    model_config = ConfigDict(frozen=True)

    plan: Plan
    original_amount: Decimal
    final_amount: Decimal
    applied_code: Optional[PromoCode] = None
    outcome: PromoOutcome = PromoOutcome.NO_PROMO
    requested_code: Optional[str] = None
    warning: Optional[str] = None
    currency: str = CURRENCY

    @property
    def discount_applied(self) -> Decimal:
        return self.original_amount - self.final_amount


def apply_discount(amount: Decimal, discount_percent: int) -> Decimal:
    """amount × (1 − d/100), arrondi half-up à 2 décimales, plancher 0.01."""
    factor = (Decimal(100) - Decimal(discount_percent)) / Decimal(100)
    discounted = (amount * factor).quantize(CENT, rounding=ROUND_HALF_UP)
    return max(discounted, MIN_AMOUNT)


def resolve_price(plan_id: str, promo_code: Optional[str] = None) -> PriceQuote:
    plan = get_plan(plan_id)
    if plan is None:
        raise InvalidPlan(plan_id)

    code = (promo_code or "").strip()
    if not code:
        return PriceQuote(plan=plan, original_amount=plan.list_price, final_amount=plan.list_price)

    promo = find_promo(code)
    if promo is None:
        return PriceQuote(
            plan=plan,
            original_amount=plan.list_price,
            final_amount=plan.list_price,
            outcome=PromoOutcome.UNKNOWN_PROMO,
            requested_code=code,
            warning=f"Promo code '{code}' is not valid; continuing at full price",
        )

    return PriceQuote(
        plan=plan,
        original_amount=plan.list_price,
        final_amount=apply_discount(plan.list_price, promo.discount_percent),
        applied_code=promo,
        outcome=PromoOutcome.APPLIED_DISCOUNT,
        requested_code=code,
    )
