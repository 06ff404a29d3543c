"""
Accès aux données du ledger (table utilisateurs): lecture et upsert de l'entitlement.
"""
import logging
from typing import Optional

import pixelglow.infra.supabase_client as supabase_client
from pixelglow import config
from pixelglow.errors import LedgerUnavailable, LedgerWriteFailed
from .models import Entitlement

logger = logging.getLogger(__name__)

ENTITLEMENT_COLUMNS = "id, paymentStatus, amount, planType, paid_at"

# module pixelglow.entitlements.repository
def get_entitlement(user_id: str) -> Optional[Entitlement]:
    """Retourne l'entitlement courant de l'utilisateur, None si absent ou en cas d'erreur."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(config.USERS_TABLE)
            .select(f"{ENTITLEMENT_COLUMNS}, {config.ENTITLEMENT_ORDER_ID_COLUMN}")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return Entitlement.from_row(rows[0]) if rows else None
    except Exception:
        logger.exception("entitlements.repository.get_entitlement failed user_id=%s", user_id)
        return None

def upsert_entitlement(entitlement: Entitlement) -> Entitlement:
    """
    Écrit les champs d'entitlement sur la ligne de l'utilisateur (last-writer-wins).
    - update ciblé sur id; si aucune ligne, upsert (id + champs).
    - Lève LedgerWriteFailed en cas d'échec.
    """
    row = entitlement.to_row()
    try:
        table = supabase_client.get_service_supabase().table(config.USERS_TABLE)
        res = table.update(row).eq("id", entitlement.user_id).execute()
        if not res.data:
            res = table.upsert({"id": entitlement.user_id, **row}, on_conflict="id").execute()
    except Exception as e:
        raise LedgerWriteFailed(diagnostic=str(e)) from e
    if not res.data:
        raise LedgerWriteFailed(diagnostic=f"no row written for user_id={entitlement.user_id}")
    return entitlement

def find_by_order_id(provider_order_id: str) -> Optional[Entitlement]:
    """
    Profil portant déjà cette commande (colonne historique paypalOrderId).
    Seconde garde avant un execute: LedgerUnavailable si la lecture échoue.
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(config.USERS_TABLE)
            .select(f"{ENTITLEMENT_COLUMNS}, {config.ENTITLEMENT_ORDER_ID_COLUMN}")
            .eq(config.ENTITLEMENT_ORDER_ID_COLUMN, provider_order_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("entitlements.repository.find_by_order_id failed provider_order_id=%s", provider_order_id)
        raise LedgerUnavailable(diagnostic=str(e)) from e
    rows = res.data or []
    return Entitlement.from_row(rows[0]) if rows else None
