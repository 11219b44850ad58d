from __future__ import annotations
import time
from fastapi import APIRouter

from recipetrio.shared.llm.ollama_client import get_llm_client

router = APIRouter(tags=["health"])

@router.get("/health")
def health():
    return {"ok": True, "ts": time.time()}


@router.get("/health/model")
async def model_health():
    client = get_llm_client()
    available = await client.check_model_availability()
    return {"ok": True, "model": client.model, "available": available, "ts": time.time()}
