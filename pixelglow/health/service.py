from urllib.parse import urlparse
import socket
from typing import Any, Dict

from pixelglow import config
from pixelglow.infra.supabase_client import get_service_supabase

def _check_table(client, name: str) -> Dict[str, Any]:
    try:
        res = client.table(name).select("*").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}

def health_supabase_info() -> Dict[str, Any]:
    parsed = urlparse(config.SUPABASE_URL) if config.SUPABASE_URL else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except OSError as e:
            dns_ok = False
            dns_error = str(e)

    info: Dict[str, Any] = {
        "supabase_url": config.SUPABASE_URL,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        client = get_service_supabase()
        for t in (config.USERS_TABLE, config.PAYMENT_ORDERS_TABLE):
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info

def health_providers_info(app_state) -> Dict[str, Any]:
    """Booléens uniquement: jamais de secrets."""
    paypal = getattr(app_state, "paypal_client", None)
    stripe_client = getattr(app_state, "stripe_client", None)
    notifier = getattr(app_state, "notifier", None)
    return {
        "paypal": {
            "configured": bool(paypal and paypal.settings.configured),
            "mode": paypal.settings.mode if paypal else None,
        },
        "stripe_legacy": {"configured": bool(stripe_client and stripe_client.configured)},
        "email": {"configured": bool(notifier and notifier.client.configured)},
    }
