"""
Taxonomie des erreurs du checkout.

Chaque erreur porte un status_code HTTP et un message public; le handler
enregistré par la factory (pixelglow.app_setup.exceptions) les rend en
{"error": message} (+ "details" pour ProviderCreateFailed).

PaymentNotCompleted n'est PAS une exception: c'est un résultat
(voir pixelglow.orders.models.PaymentNotCompleted).
"""
from typing import Any, Optional


class CheckoutError(Exception):
    status_code = 500
    message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, *, diagnostic: Any = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        # Charge brute du fournisseur / de la base: conservée côté serveur (logs)
        self.diagnostic = diagnostic

    def public_body(self) -> dict:
        return {"error": self.message}


class ValidationError(CheckoutError):
    status_code = 400
    message = "Invalid request"


class InvalidPlan(ValidationError):
    message = "Unknown plan"

    def __init__(self, plan_id: str):
        super().__init__(f"Unknown plan: {plan_id}")
        self.plan_id = plan_id


class Unauthenticated(CheckoutError):
    status_code = 401
    message = "User not authenticated"


class OrderOwnershipMismatch(CheckoutError):
    status_code = 403
    message = "Order belongs to another user"


class ProviderCreateFailed(CheckoutError):
    message = "Failed to create PayPal order"

    def public_body(self) -> dict:
        body = {"error": self.message}
        details = _provider_details(self.diagnostic)
        if details is not None:
            body["details"] = details
        return body


class ProviderCaptureFailed(CheckoutError):
    message = "Failed to execute PayPal payment"


class ProviderUnavailable(CheckoutError):
    """Timeout / erreur réseau: condition réessayable, distincte d'un refus."""
    status_code = 503
    message = "Payment provider unavailable, please try again"


class LedgerWriteFailed(CheckoutError):
    """Écriture de l'entitlement échouée APRÈS un débit réussi (alerte opérationnelle)."""
    message = "Failed to record entitlement"


def _provider_details(diagnostic: Any) -> Any:
    """
    Extrait la partie 'details' d'une erreur PayPal (comme le front l'attend),
    sinon le message brut.
    """
    if diagnostic is None:
        return None
    if isinstance(diagnostic, dict):
        return diagnostic.get("details") or diagnostic.get("message") or diagnostic.get("name")
    return str(diagnostic)


class ProviderLookupFailed(CheckoutError):
    """Lecture d'une commande impossible chez le fournisseur (vérification)."""
    message = "Failed to retrieve payment"


class LedgerUnavailable(CheckoutError):
    """Journal des captures / ledger illisible: aucune capture n'est tentée à l'aveugle."""
    status_code = 503
    message = "Order ledger unavailable, please try again"
