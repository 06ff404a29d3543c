"""
Dispatcher de notifications (e-mails de bienvenue / reçu).

- send_notification: envoi effectif via Resend, lève en cas d'échec.
- dispatch_notification: tâche de fond (BackgroundTasks) avec sa propre
  politique de réessai; toute erreur est journalisée puis absorbée, elle ne
  remonte jamais vers l'acheteur ni ne conditionne le succès du checkout.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

from pixelglow import config
from pixelglow.infra.resend_client import ResendClient
from .templates import render_template

logger = logging.getLogger(__name__)

RETRY_DELAY_SECONDS = 1.0


class Notifier:
    def __init__(self, client: ResendClient, sender: str = config.NOREPLY_EMAIL, max_attempts: int = config.NOTIFY_MAX_ATTEMPTS):
        self.client = client
        self.sender = sender
        self.max_attempts = max(1, max_attempts)

    async def send_notification(
        self,
        recipient_email: str,
        template_id: str,
        template_data: Optional[Dict[str, Any]] = None,
        subject: Optional[str] = None,
    ) -> Dict[str, Any]:
        template = render_template(template_id, template_data)
        return await self.client.send_email(
            sender=self.sender,
            to=[recipient_email],
            subject=subject or template["subject"],
            html=template["html"],
        )

    async def dispatch_notification(
        self,
        recipient_email: Optional[str],
        template_id: str,
        template_data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        if not recipient_email:
            logger.warning("notifications.dispatch skipped template=%s: no recipient", template_id)
            return False
        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await self.send_notification(recipient_email, template_id, template_data)
                logger.info("notifications.dispatch sent template=%s id=%s", template_id, result.get("id"))
                return True
            except Exception:
                logger.warning(
                    "notifications.dispatch failed template=%s attempt=%s/%s",
                    template_id, attempt, self.max_attempts, exc_info=True,
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(RETRY_DELAY_SECONDS * attempt)
        logger.error("notifications.dispatch dropped template=%s after %s attempts", template_id, self.max_attempts)
        return False
