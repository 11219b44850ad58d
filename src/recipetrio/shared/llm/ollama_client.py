from __future__ import annotations

import json
import logging
from contextlib import aclosing
from dataclasses import asdict, dataclass
from typing import AsyncGenerator, Awaitable, Callable, Dict, Optional

import httpx

from recipetrio.shared.config.settings import settings
from recipetrio.shared.concurrency import MODEL_CALL_LIMIT
from recipetrio.shared.errors import UpstreamGenerationError

log = logging.getLogger("llm")


@dataclass(frozen=True)
class GenerationOptions:
    temperature: float = 0.7
    top_p: float = 0.9
    max_tokens: int = 1500

    def to_ollama(self) -> Dict[str, float]:
        return {
            "temperature": self.temperature,
            "top_p": self.top_p,
            "num_predict": self.max_tokens,
        }


SUMMARY_OPTIONS = GenerationOptions()
DETAIL_OPTIONS = GenerationOptions(temperature=0.6, top_p=0.8, max_tokens=2500)

FragmentCallback = Callable[[str], Awaitable[None]]


class OllamaClient:
    """
    Single-attempt client for an Ollama-compatible /api/generate endpoint.
    Failures surface as UpstreamGenerationError and are never retried here.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        *,
        request_timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.OLLAMA_HOST).rstrip("/")
        self.model = model or settings.LLM_MODEL
        self.timeout = httpx.Timeout(request_timeout or settings.LLM_REQUEST_TIMEOUT)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    def _payload(self, prompt: str, options: GenerationOptions, stream: bool) -> Dict[str, object]:
        return {
            "model": self.model,
            "prompt": prompt,
            "options": options.to_ollama(),
            "stream": stream,
        }

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        """
        Run one blocking generation and return the full response text.
        """
        opts = options or SUMMARY_OPTIONS
        log.info("Generating recipe with LLM prompt_len=%d options=%s", len(prompt), asdict(opts))
        try:
            async with MODEL_CALL_LIMIT:
                async with self._client() as client:
                    resp = await client.post("/api/generate", json=self._payload(prompt, opts, stream=False))
                    resp.raise_for_status()
                    data = resp.json()
        except httpx.HTTPError as e:
            log.error("LLM generation error: %s", e)
            raise UpstreamGenerationError(f"Recipe generation failed: {e}") from e
        except ValueError as e:
            log.error("LLM returned a non-JSON body: %s", e)
            raise UpstreamGenerationError(f"Recipe generation failed: invalid response body ({e})") from e

        if not isinstance(data, dict):
            log.error("LLM returned a non-object body: %s", type(data).__name__)
            raise UpstreamGenerationError("Recipe generation failed: invalid response body")
        if data.get("error"):
            raise UpstreamGenerationError(f"Recipe generation failed: {data['error']}")
        text = data.get("response") or ""
        if not isinstance(text, str):
            raise UpstreamGenerationError("Recipe generation failed: invalid response body")
        log.info("LLM generation completed response_len=%d", len(text))
        return text

    async def stream(self, prompt: str, options: Optional[GenerationOptions] = None) -> AsyncGenerator[str, None]:
        """
        Stream a generation as non-empty text fragments, in the order produced.
        """
        opts = options or SUMMARY_OPTIONS
        log.info("Starting streaming generation prompt_len=%d options=%s", len(prompt), asdict(opts))
        try:
            async with MODEL_CALL_LIMIT:
                async with self._client() as client:
                    async with client.stream("POST", "/api/generate", json=self._payload(prompt, opts, stream=True)) as resp:
                        resp.raise_for_status()
                        async for line in resp.aiter_lines():
                            if not line.strip():
                                continue
                            try:
                                chunk = json.loads(line)
                            except ValueError:
                                log.debug("Skipping undecodable stream line: %r", line[:80])
                                continue
                            if not isinstance(chunk, dict):
                                raise UpstreamGenerationError("Streaming generation failed: invalid response body")
                            if chunk.get("error"):
                                raise UpstreamGenerationError(f"Streaming generation failed: {chunk['error']}")
                            tok = chunk.get("response")
                            if isinstance(tok, str) and tok:
                                yield tok
                            if chunk.get("done"):
                                break
        except httpx.HTTPError as e:
            log.error("LLM streaming generation error: %s", e)
            raise UpstreamGenerationError(f"Streaming generation failed: {e}") from e
        log.info("LLM streaming generation completed")

    async def generate_streaming(
        self,
        prompt: str,
        options: Optional[GenerationOptions],
        on_fragment: FragmentCallback,
    ) -> None:
        async with aclosing(self.stream(prompt, options)) as fragments:
            async for tok in fragments:
                await on_fragment(tok)

    async def check_model_availability(self) -> bool:
        """
        Advisory check that the configured model is pulled on the server.
        """
        family = self.model.split(":", 1)[0]
        try:
            async with self._client() as client:
                resp = await client.get("/api/tags")
                resp.raise_for_status()
                body = resp.json()
                models = body.get("models") if isinstance(body, dict) else None
                if not isinstance(models, list):
                    models = []
                names = [str(m.get("name", "")) for m in models if isinstance(m, dict)]
        except (httpx.HTTPError, ValueError) as e:
            log.error("Failed to check model availability: %s", e)
            return False

        available = any(self.model in n or n.startswith(family) for n in names)
        if not available:
            log.warning("Model %s not found. Available models: %s", self.model, names)
        return available


_client: Optional[OllamaClient] = None


def get_llm_client() -> OllamaClient:
    global _client
    if _client is None:
        _client = OllamaClient()
    return _client
