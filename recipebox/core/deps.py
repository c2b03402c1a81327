# recipebox/core/deps.py
from __future__ import annotations

import httpx
from fastapi import Request

from recipebox.clients.base import AIClient
from recipebox.services.pipeline import RecipePipeline


def get_ai(request: Request) -> AIClient:
    return request.app.state.ai


def get_http(request: Request) -> httpx.AsyncClient:
    return request.app.state.http


def get_pipeline(request: Request) -> RecipePipeline:
    return request.app.state.pipeline
