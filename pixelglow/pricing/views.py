from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from .service import resolve_price

router = APIRouter(prefix="/api/v1/pricing", tags=["Pricing API"])


class QuoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan_type: str = Field(alias="planType", min_length=1)
    promo_code: Optional[str] = Field(default=None, alias="promoCode")


# module pixelglow.pricing.views
@router.post("/quote")
def quote(body: QuoteRequest):
    """
    Devis pour la page checkout.
    - promo.outcome: no_promo | applied_discount | unknown_promo
    - unknown_promo: prix plein + warning (le front affiche l'erreur, l'achat reste possible)
    - Erreurs: 400 si plan inconnu
    """
    q = resolve_price(body.plan_type, body.promo_code)
    promo = {"outcome": q.outcome.value}
    if q.applied_code:
        promo["code"] = q.applied_code.code
        promo["discountPercent"] = q.applied_code.discount_percent
    if q.warning:
        promo["code"] = q.requested_code
        promo["warning"] = q.warning
    return {
        "planType": q.plan.id,
        "planName": q.plan.name,
        "features": list(q.plan.features),
        "originalAmount": f"{q.original_amount:.2f}",
        "finalAmount": f"{q.final_amount:.2f}",
        "currency": q.currency,
        "promo": promo,
    }
