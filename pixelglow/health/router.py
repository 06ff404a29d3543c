from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from pixelglow.utils.rate_limit import rate_limit_health_info
from .service import health_providers_info, health_supabase_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/supabase")
def health_supabase():
    return JSONResponse(health_supabase_info())

@router.get("/providers")
def health_providers(request: Request):
    info = health_providers_info(request.app.state)
    info["rate_limit"] = rate_limit_health_info(request)
    return info
