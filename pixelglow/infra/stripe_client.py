"""
Adaptateur Stripe (fournisseur historique): lecture seule des sessions Checkout.

Les anciennes commandes (identifiants cs_...) sont vérifiées ici; plus aucune
session n'est créée côté Stripe.
"""
from typing import Any, Dict, Optional

import stripe
from starlette.concurrency import run_in_threadpool


def _as_dict(obj: Any) -> Dict[str, Any]:
    # StripeObject: to_dict_recursive (anciennes versions) ou to_dict
    for attr in ("to_dict_recursive", "to_dict"):
        fn = getattr(obj, attr, None)
        if callable(fn):
            return fn()
    return dict(obj)


class StripeLegacyClient:
    def __init__(self, api_key: str, client: Optional[stripe.StripeClient] = None):
        self.api_key = api_key
        self._client = client or (stripe.StripeClient(api_key) if api_key else None)

    @property
    def configured(self) -> bool:
        return self._client is not None

    def _require(self) -> stripe.StripeClient:
        if self._client is None:
            raise RuntimeError("STRIPE_SECRET_KEY manquant pour StripeLegacyClient")
        return self._client

    async def get_session(self, session_id: str) -> Dict[str, Any]:
        """
        Récupère une session Checkout par son identifiant.
        Retour: dict incluant "id", "payment_status", "amount_total", "currency", "metadata".
        Le SDK est synchrone: exécuté dans le threadpool.
        """
        client = self._require()
        session = await run_in_threadpool(client.checkout.sessions.retrieve, session_id)
        return _as_dict(session)
