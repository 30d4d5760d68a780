"""
Ollama chat client used by the budget assistant
"""
import asyncio
import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from budget_app.core.config import Settings, get_settings
from budget_app.core.logging_config import LoggingConfig
from budget_app.core.metrics import (llm_request_duration_seconds,
                                     llm_requests_total)

logger = LoggingConfig.get_logger(__name__)


class InferenceResponse(BaseModel):
    """Chat completion returned by the inference backend"""
    model: str
    response: Optional[str] = None
    done: bool = False


class InferenceError(Exception):
    """Raised when the inference backend cannot produce a completion"""
    pass


class InferenceClient:
    """
    Client for the Ollama `/api/chat` endpoint.

    One request per `chat()` call; timeouts and connection errors are retried
    up to `llm_max_retries` attempts, HTTP error statuses are not.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def settings(self) -> Settings:
        """Lazy load settings"""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def model(self) -> str:
        return self.settings.ollama_model

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.settings.ollama_url,
                timeout=self.settings.llm_timeout_seconds,
                transport=self._transport,
                limits=httpx.Limits(
                    max_keepalive_connections=5,
                    max_connections=10,
                ),
            )
        return self._client

    async def chat(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        history: Optional[List[Dict[str, str]]] = None,
        **kwargs: Any,
    ) -> InferenceResponse:
        """
        Send one chat request

        Args:
            prompt: User message content
            system_prompt: System instruction placed before the user message
            history: Prior messages in Ollama chat format
            **kwargs: Sampling options (temperature, top_p, num_ctx)

        Returns:
            InferenceResponse; `response` is None when the backend replied
            without message content
        """
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if history:
            messages.extend(history)
        messages.append({"role": "user", "content": prompt})

        options = {"temperature": kwargs.get("temperature", self.settings.llm_temperature)}
        for key in ("top_p", "num_ctx"):
            if key in kwargs:
                options[key] = kwargs[key]

        payload = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": options,
        }

        client = self._get_client()
        max_retries = self.settings.llm_max_retries
        retry_delay = 1.0
        start_time = time.time()

        for attempt in range(max_retries):
            try:
                response = await client.post("/api/chat", json=payload)
                response.raise_for_status()
                data = response.json()
                break
            except (httpx.TimeoutException, httpx.TransportError) as e:
                if attempt < max_retries - 1:
                    logger.warning(
                        "LLM request failed, retrying",
                        extra={"attempt": attempt + 1, "error": str(e), "model": self.model},
                    )
                    await asyncio.sleep(retry_delay * (attempt + 1))
                    continue
                self._record_failure(start_time)
                raise InferenceError(
                    f"Request to {self.settings.ollama_url} failed after {max_retries} attempts: {e}"
                ) from e
            except httpx.HTTPStatusError as e:
                self._record_failure(start_time)
                raise InferenceError(
                    f"HTTP error from {self.settings.ollama_url}: {e.response.status_code} - {e.response.text}"
                ) from e
            except ValueError as e:
                self._record_failure(start_time)
                raise InferenceError(f"Malformed response from {self.settings.ollama_url}: {e}") from e

        if not isinstance(data, dict):
            self._record_failure(start_time)
            raise InferenceError(f"Unexpected response shape from {self.settings.ollama_url}")

        message = data.get("message")
        content = message.get("content") if isinstance(message, dict) else None

        llm_requests_total.labels(model=self.model, status="success").inc()
        llm_request_duration_seconds.labels(model=self.model).observe(time.time() - start_time)

        return InferenceResponse(
            model=data.get("model") or self.model,
            response=content if isinstance(content, str) else None,
            done=bool(data.get("done", False)),
        )

    def _record_failure(self, start_time: float) -> None:
        llm_requests_total.labels(model=self.model, status="error").inc()
        llm_request_duration_seconds.labels(model=self.model).observe(time.time() - start_time)

    async def close(self):
        """Close the HTTP client"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Global client instance
_inference_client: Optional[InferenceClient] = None


def get_inference_client() -> InferenceClient:
    """Get global inference client instance"""
    global _inference_client
    if _inference_client is None:
        _inference_client = InferenceClient()
    return _inference_client


async def close_inference_client() -> None:
    global _inference_client
    if _inference_client is not None:
        await _inference_client.close()
        _inference_client = None
