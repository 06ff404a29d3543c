"""
Catalogue figé des plans et des codes promo (aucune I/O).
"""
from decimal import Decimal
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

CURRENCY = "USD"
CENT = Decimal("0.01")


class Plan(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    list_price: Decimal
    features: Tuple[str, ...] = ()

    @field_validator("list_price")
    @classmethod
    def _two_decimals(cls, v: Decimal) -> Decimal:
        return v.quantize(CENT)


class PromoCode(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    discount_percent: int = Field(gt=0, le=100)
    description: str = ""


PLANS: Dict[str, Plan] = {
    p.id: p
    for p in (
        Plan(
            id="basic",
            name="Basic",
            list_price=Decimal("29"),
            features=(
                "3 hours turnaround time",
                "10 headshots",
                "Unique backgrounds and clothing",
            ),
        ),
        Plan(
            id="professional",
            name="Professional",
            list_price=Decimal("39"),
            features=("100 headshots", "Unique backgrounds and clothing"),
        ),
        Plan(
            id="executive",
            name="Executive",
            list_price=Decimal("59"),
            features=("200 headshots", "Unique backgrounds and clothing"),
        ),
    )
}

# Clés en casefold(): la recherche se fait après normalisation
PROMO_CODES: Dict[str, PromoCode] = {
    c.code.casefold(): c
    for c in (
        PromoCode(code="LAUNCH50", discount_percent=50, description="Launch offer: 50% off"),
        PromoCode(code="WELCOME20", discount_percent=20, description="Welcome offer: 20% off"),
        PromoCode(code="FRIENDS25", discount_percent=25, description="Referral offer: 25% off"),
    )
}


def get_plan(plan_id: str) -> Plan | None:
    return PLANS.get((plan_id or "").strip().lower())


def find_promo(code: str) -> PromoCode | None:
    return PROMO_CODES.get((code or "").strip().casefold())
