"""
Middlewares transverses de l'application.
- register_basic_middlewares: CORS, hôtes autorisés, en-têtes X-Forwarded-*.
- register_security_middleware: en-têtes de sécurité et CSP (SDK PayPal autorisé).
- register_no_cache_middleware: aucune mise en cache des réponses checkout.
"""
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from pixelglow.config import ALLOWED_HOSTS, COOKIE_SECURE, CORS_ORIGINS, SUPABASE_URL

try:
    from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
except ImportError:
    ProxyHeadersMiddleware = None

PAYPAL_ORIGINS = ("https://www.paypal.com", "https://www.sandbox.paypal.com", "https://www.paypalobjects.com")
DOCS_CDNS = ("https://cdn.jsdelivr.net", "https://unpkg.com")
NO_CACHE_PREFIXES = ("/api/v1/paypal", "/api/v1/orders")

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


def build_csp() -> str:
    """CSP du front checkout: bouton et popup PayPal, Supabase en connect-src, Swagger UI."""
    paypal = " ".join(PAYPAL_ORIGINS)
    cdns = " ".join(DOCS_CDNS)
    connect = " ".join(["'self'", paypal] + ([SUPABASE_URL] if SUPABASE_URL else []))
    directives = [
        "default-src 'self'",
        "base-uri 'self'",
        "object-src 'none'",
        "frame-ancestors 'none'",
        f"img-src 'self' data: https://fastapi.tiangolo.com {paypal}",
        f"style-src 'self' 'unsafe-inline' {cdns}",
        f"script-src 'self' 'unsafe-inline' {cdns} {paypal}",
        f"frame-src {paypal}",
        f"connect-src {connect}",
    ]
    return "; ".join(directives)


def security_headers() -> Dict[str, str]:
    headers = {
        "X-Frame-Options": "DENY",
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=(self)",
    }
    if COOKIE_SECURE:
        headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains"
    return headers


def register_basic_middlewares(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        # Les cookies de session ne voyagent pas avec une origine joker
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    hosts = list(ALLOWED_HOSTS)
    if "*" in CORS_ORIGINS:
        hosts.append("*")
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=hosts)
    # Derrière un reverse proxy: schéma et IP client depuis X-Forwarded-*
    if ProxyHeadersMiddleware is not None:
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])


def register_security_middleware(app: FastAPI) -> None:
    static_headers = security_headers()
    csp = build_csp()

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in static_headers.items():
            response.headers.setdefault(name, value)
        response.headers["Content-Security-Policy"] = csp
        return response


def register_no_cache_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def no_cache_for_checkout(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith(NO_CACHE_PREFIXES):
            response.headers.update(NO_CACHE_HEADERS)
        return response
