# recipebox/services/health.py
from __future__ import annotations

import sqlite3
import time
from typing import Any, Dict, Optional, Tuple

import httpx

from recipebox.core import config
from recipebox.services.recipes_repo import recipes_db


class _Timer:
    def __init__(self) -> None:
        self.start = time.perf_counter()

    def result(self, status: str, error: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
        out: Dict[str, Any] = {"status": status, "latency_ms": int((time.perf_counter() - self.start) * 1000)}
        out.update(extra)
        if error:
            out["error"] = error
        return out


def check_db() -> Dict[str, Any]:
    t = _Timer()
    try:
        with recipes_db() as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM recipes").fetchone()
        return t.result("ok", recipes=count)
    except sqlite3.Error as e:
        return t.result("fail", str(e))


async def check_ai(client: httpx.AsyncClient) -> Dict[str, Any]:
    t = _Timer()
    backend = config.AI_BACKEND

    if backend == "gemini":
        # startup refuses to run without a key, so a live process has one;
        # there is no free endpoint to ping beyond that
        return t.result("ok", backend=backend)

    try:
        r = await client.get(f"{config.OLLAMA_BASE_URL.rstrip('/')}/api/tags", timeout=2.0)
        r.raise_for_status()
    except httpx.HTTPError as e:
        return t.result("degraded", str(e), backend=backend)
    return t.result("ok", backend=backend)


async def readiness(client: httpx.AsyncClient) -> Tuple[Dict[str, Any], int]:
    """
    Readiness payload and HTTP status. The database is required; the AI
    backend is not, since JSON-LD extraction and the library work without it.
    """
    db = check_db()
    ai = await check_ai(client)

    if db["status"] != "ok":
        overall, http_status = "fail", 503
    elif ai["status"] != "ok":
        overall, http_status = "degraded", 200
    else:
        overall, http_status = "ok", 200

    return {"status": overall, "checks": {"db": db, "ai": ai}, **version_payload()}, http_status


def version_payload() -> Dict[str, Any]:
    return {
        "version": config.APP_VERSION,
        "git_sha": config.GIT_SHA,
        "build_date": config.BUILD_DATE,
        "ai_backend": config.AI_BACKEND,
    }
