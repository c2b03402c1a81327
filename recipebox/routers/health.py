# recipebox/routers/health.py
from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Response

from recipebox.core.deps import get_http
from recipebox.services.health import readiness, version_payload

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    # liveness only
    return {"status": "ok", **version_payload()}


@router.get("/health/ready")
async def ready(response: Response, client: httpx.AsyncClient = Depends(get_http)):
    payload, response.status_code = await readiness(client)
    return payload


@router.get("/version")
def version():
    return version_payload()
