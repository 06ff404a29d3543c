# pixelglow.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend checkout.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, PayPal, Stripe legacy, Resend)
- Fournit les URLs de redirection du flux checkout (/postcheckout, /checkout)
- Expose les noms de tables/colonnes du ledger (userTable, payment_orders)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

def _float_env(name: str, default: float) -> float:
    try:
        return float(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

APP_ENV = _clean_env(os.getenv("APP_ENV") or "development").lower()

# Supabase: URLs et clés (anon/service)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Tables du ledger: profil utilisateur (entitlement) et journal des captures
USERS_TABLE = _clean_env(os.getenv("USERS_TABLE") or "userTable")
PAYMENT_ORDERS_TABLE = _clean_env(os.getenv("PAYMENT_ORDERS_TABLE") or "payment_orders")
# Nom de colonne historique (spécifique PayPal) pour l'identifiant de commande
ENTITLEMENT_ORDER_ID_COLUMN = _clean_env(os.getenv("ENTITLEMENT_ORDER_ID_COLUMN") or "paypalOrderId")

# Cookies / sécurité
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# URL publique du front (redirections PayPal) et URL de l'app (liens e-mails)
BASE_URL = _clean_env(os.getenv("BASE_URL") or os.getenv("NEXT_PUBLIC_BASE_URL") or "http://localhost:3000").rstrip("/")
APP_URL = _clean_env(os.getenv("APP_URL") or os.getenv("NEXT_PUBLIC_APP_URL") or "http://localhost:3000").rstrip("/")

# Pages de retour après approbation / annulation chez le fournisseur
CHECKOUT_RETURN_PATH = os.getenv("CHECKOUT_RETURN_PATH", "/postcheckout")
CHECKOUT_CANCEL_PATH = os.getenv("CHECKOUT_CANCEL_PATH", "/checkout")

# PayPal (REST v1 payments): identifiants client et mode sandbox/live
PAYPAL_CLIENT_ID = _clean_env(os.getenv("PAYPAL_CLIENT_ID") or "")
PAYPAL_CLIENT_SECRET = _clean_env(os.getenv("PAYPAL_CLIENT_SECRET") or "")
PAYPAL_MODE = _clean_env(os.getenv("PAYPAL_MODE") or ("live" if APP_ENV == "production" else "sandbox")).lower()
PAYPAL_TIMEOUT_SECONDS = _float_env("PAYPAL_TIMEOUT_SECONDS", 15.0)

# Stripe: uniquement pour vérifier les anciennes sessions Checkout (cs_...)
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")

# Resend (e-mails transactionnels)
RESEND_API_KEY = _clean_env(os.getenv("RESEND_API_KEY") or "")
NOREPLY_EMAIL = _clean_env(os.getenv("NOREPLY_EMAIL") or "onboarding@resend.dev")
NOTIFY_MAX_ATTEMPTS = max(1, _int_env("NOTIFY_MAX_ATTEMPTS", 2))
