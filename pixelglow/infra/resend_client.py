"""
Adaptateur Resend (e-mails transactionnels) au-dessus du SDK officiel.

Le SDK est synchrone et configuré par la clé globale resend.api_key:
l'envoi est exécuté dans le threadpool.
"""
from typing import Any, Dict, List, Optional

import resend
from starlette.concurrency import run_in_threadpool


class ResendError(Exception):
    """Réponse Resend sans identifiant d'e-mail."""

    def __init__(self, payload: Any):
        super().__init__(f"Resend rejected the e-mail: {payload}")
        self.payload = payload


class ResendClient:
    def __init__(self, api_key: str, emails: Optional[Any] = None):
        self.api_key = api_key
        # resend.Emails par défaut; remplaçable en test
        self._emails = emails or resend.Emails

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _send(self, params: Dict[str, Any]) -> Any:
        resend.api_key = self.api_key
        return self._emails.send(params)

    async def send_email(self, *, sender: str, to: List[str], subject: str, html: str) -> Dict[str, Any]:
        """Retourne {"id": "..."}; lève ResendError (ou l'erreur du SDK) sinon."""
        if not self.api_key:
            raise RuntimeError("RESEND_API_KEY manquant")
        params = {"from": sender, "to": to, "subject": subject, "html": html}
        response = await run_in_threadpool(self._send, params)
        if not isinstance(response, dict) or not response.get("id"):
            raise ResendError(response)
        return dict(response)
