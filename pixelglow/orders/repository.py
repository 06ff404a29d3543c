"""
Journal des captures (table payment_orders): enregistrement de l'issue
terminale d'une commande, clé = provider_order_id.

Sert de garde d'idempotence: une seconde capture d'une commande déjà
terminale renvoie le résultat stocké sans rappeler le fournisseur.
Une lecture impossible lève LedgerUnavailable (jamais "absent" par défaut).
"""
import logging
from typing import Optional

import pixelglow.infra.supabase_client as supabase_client
from pixelglow import config
from pixelglow.errors import LedgerUnavailable
from .models import CaptureRecord

logger = logging.getLogger(__name__)

# module pixelglow.orders.repository
def get_capture(provider_order_id: str) -> Optional[CaptureRecord]:
    """Retourne la capture enregistrée, None si absente; LedgerUnavailable si la lecture échoue."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(config.PAYMENT_ORDERS_TABLE)
            .select("*")
            .eq("provider_order_id", provider_order_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.get_capture failed provider_order_id=%s", provider_order_id)
        raise LedgerUnavailable(diagnostic=str(e)) from e
    rows = res.data or []
    return CaptureRecord.model_validate(rows[0]) if rows else None

def save_capture(record: CaptureRecord) -> bool:
    """Upsert sur provider_order_id (réécrire la même capture est sans effet)."""
    try:
        (
            supabase_client.get_service_supabase()
            .table(config.PAYMENT_ORDERS_TABLE)
            .upsert(record.model_dump(mode="json"), on_conflict="provider_order_id")
            .execute()
        )
        return True
    except Exception:
        logger.exception("orders.repository.save_capture failed provider_order_id=%s", record.provider_order_id)
        return False
