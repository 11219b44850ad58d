import asyncio
from recipetrio.shared.config.settings import settings

# Shared by batch and streaming pipelines alike; three slots per request.
MODEL_CALL_LIMIT = asyncio.Semaphore(settings.LLM_MAX_CONCURRENCY)
