"""
Limitation de débit optionnelle pour les endpoints checkout.

- fastapi-limiter (Redis) si initialisé par le lifespan.
- Fallback mémoire local si LOCAL_RATE_LIMIT_FALLBACK=1.
- Désactivé proprement si app.state.rate_limit_enabled est False.
"""
import hashlib
import logging
import os
import time
from typing import Any, Dict, List, Tuple

from fastapi import HTTPException, Request

from pixelglow.utils.security import COOKIE_NAME

logger = logging.getLogger(__name__)

def _client_key(request: Request) -> str:
    # Priorité: session cookie (hashé) puis IP
    token = request.cookies.get(COOKIE_NAME)
    path = request.url.path
    if token:
        h = hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
        return f"user:{h}:{path}"
    ip = request.client.host if request.client else "local"
    return f"ip:{ip}:{path}"

def _local_hit(request: Request, times: int, seconds: int) -> None:
    now = time.time()
    key = _client_key(request)
    # store: clé -> (fenêtre en secondes, horodatages dans la fenêtre)
    store: Dict[str, Tuple[int, List[float]]] = getattr(request.app.state, "_rl_store", {})
    for stale in [k for k, (window, ts) in store.items() if not ts or now - ts[-1] >= window]:
        del store[stale]
    hits = [t for t in store.get(key, (seconds, []))[1] if now - t < seconds]
    if len(hits) >= times:
        store[key] = (seconds, hits)
        request.app.state._rl_store = store
        raise HTTPException(status_code=429, detail="Too Many Requests")
    hits.append(now)
    store[key] = (seconds, hits)
    request.app.state._rl_store = store

def optional_rate_limit(times: int, seconds: int):
    async def _dep(request: Request):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            _local_hit(request, times, seconds)
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return

        from fastapi_limiter import FastAPILimiter
        if getattr(FastAPILimiter, "redis", None) is None:
            return

        from fastapi_limiter.depends import RateLimiter

        async def _identifier(req: Request) -> str:
            return _client_key(req)

        try:
            # RateLimiter.__call__ attend (request, response); la réponse n'est utilisée que pour les en-têtes
            from starlette.responses import Response
            await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, Response())
        except HTTPException:
            raise
        except Exception:
            # Redis indisponible en cours de route: pas de 429 en prod
            logger.warning("rate_limit backend error on %s", request.url.path, exc_info=True)
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    try:
        from fastapi_limiter import FastAPILimiter
        ready = getattr(FastAPILimiter, "redis", None) is not None
    except ImportError:
        ready = False
    return {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": ready,
        "backend": "redis" if ready else ("memory" if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1" else None),
    }
