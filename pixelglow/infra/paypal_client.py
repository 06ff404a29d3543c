"""
Adaptateur PayPal (REST v1 /payments/payment): centralise les appels HTTP.

- Instance explicite construite au démarrage (lifespan) à partir de PayPalSettings,
  injectée via Depends(get_paypal_client): pas de configuration globale de module.
- Appels asynchrones httpx avec timeout borné.
- Erreurs: PayPalAPIError (réponse non-2xx, payload brut conservé) et
  PayPalUnavailable (timeout / réseau, réessayable).
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

SANDBOX_API = "https://api-m.sandbox.paypal.com"
LIVE_API = "https://api-m.paypal.com"


@dataclass(frozen=True)
class PayPalSettings:
    client_id: str
    client_secret: str
    mode: str = "sandbox"
    timeout: float = 15.0

    @property
    def base_url(self) -> str:
        return LIVE_API if self.mode == "live" else SANDBOX_API

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @classmethod
    def from_config(cls) -> "PayPalSettings":
        from pixelglow import config
        return cls(
            client_id=config.PAYPAL_CLIENT_ID,
            client_secret=config.PAYPAL_CLIENT_SECRET,
            mode=config.PAYPAL_MODE,
            timeout=config.PAYPAL_TIMEOUT_SECONDS,
        )


class PayPalAPIError(Exception):
    def __init__(self, status_code: int, payload: Any):
        super().__init__(f"PayPal API error status={status_code}")
        self.status_code = status_code
        self.payload = payload


class PayPalUnavailable(Exception):
    pass


class PayPalClient:
    # Marge avant expiration du token OAuth2
    TOKEN_LEEWAY_SECONDS = 60

    def __init__(self, settings: PayPalSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._http = httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=httpx.Timeout(settings.timeout),
            transport=transport,
        )
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token
        data = await self._send(
            "POST",
            "/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(self.settings.client_id, self.settings.client_secret),
            headers={"Accept": "application/json"},
        )
        self._token = data.get("access_token") or ""
        expires_in = float(data.get("expires_in") or 0)
        self._token_expires_at = time.monotonic() + max(0.0, expires_in - self.TOKEN_LEEWAY_SECONDS)
        return self._token

    async def _send(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("paypal %s %s timed out", method, url)
            raise PayPalUnavailable(f"PayPal timeout: {e}") from e
        except httpx.TransportError as e:
            logger.warning("paypal %s %s transport error: %s", method, url, e)
            raise PayPalUnavailable(f"PayPal unreachable: {e}") from e

        try:
            payload = response.json() if response.content else {}
        except ValueError:
            payload = {"message": response.text}
        if response.status_code >= 400:
            raise PayPalAPIError(response.status_code, payload)
        return payload

    async def _call(self, method: str, url: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        token = await self._access_token()
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        return await self._send(method, url, json=json, headers=headers)

    async def create_payment(self, payment: Dict[str, Any]) -> Dict[str, Any]:
        """POST /v1/payments/payment: retourne la ressource (id, state, links)."""
        return await self._call("POST", "/v1/payments/payment", json=payment)

    async def execute_payment(self, payment_id: str, payer_id: str) -> Dict[str, Any]:
        """POST /v1/payments/payment/{id}/execute: NON idempotent côté PayPal."""
        return await self._call("POST", f"/v1/payments/payment/{payment_id}/execute", json={"payer_id": payer_id})

    async def get_payment(self, payment_id: str) -> Dict[str, Any]:
        """GET /v1/payments/payment/{id}: lecture seule."""
        return await self._call("GET", f"/v1/payments/payment/{payment_id}")
