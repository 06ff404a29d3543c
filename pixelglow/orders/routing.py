"""
Espace de noms d'identifiants indépendant du fournisseur.

- Préfixe explicite "paypal:<id>" / "stripe:<id>" (ou paramètre provider) prioritaire.
- Sinon, forme de l'identifiant: "cs_..." -> Stripe (historique),
  "PAY-..." / "PAYID-..." -> PayPal.
"""
from typing import Optional, Tuple

from pixelglow.errors import ValidationError
from .models import Provider

_PAYPAL_PREFIXES = ("PAYID-", "PAY-")
_STRIPE_PREFIXES = ("cs_test_", "cs_live_", "cs_")


def resolve_identifier(identifier: str, provider: Optional[str] = None) -> Tuple[Provider, str]:
    ident = (identifier or "").strip()
    if not ident:
        raise ValidationError("Missing orderID parameter")

    scheme, sep, rest = ident.partition(":")
    if sep and scheme.lower() in (Provider.PAYPAL.value, Provider.STRIPE.value):
        provider = provider or scheme.lower()
        ident = rest.strip()
        if not ident:
            raise ValidationError("Missing orderID parameter")

    if provider:
        try:
            return Provider(provider.lower()), ident
        except ValueError:
            raise ValidationError(f"Unsupported payment provider: {provider}")

    if ident.startswith(_STRIPE_PREFIXES):
        return Provider.STRIPE, ident
    if ident.upper().startswith(_PAYPAL_PREFIXES):
        return Provider.PAYPAL, ident
    raise ValidationError("Unrecognised order identifier")
