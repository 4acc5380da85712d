"""Client for the OpenAI-compatible chat completions endpoint used for recommendations.

Single attempt per call, caller-chosen timeout. Every failure is raised as
UpstreamDegraded so the recommendation engine can switch to its rule-based
fallback.
"""

from typing import Any, Dict, Optional, Protocol

import httpx
import structlog

from lokalaku.core.config import settings
from lokalaku.core.exceptions import UpstreamDegraded

logger = structlog.get_logger(__name__)


class GenerationClient(Protocol):
    async def complete(self, prompt: str, *, timeout: float, max_tokens: int) -> str:
        """Send one user instruction and return the generated text payload."""
        ...


class ChatCompletionsClient:
    """httpx-backed client for ``POST {base_url}/chat/completions``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        force_json: Optional[bool] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.LLM_API_KEY
        self.base_url = (base_url or settings.LLM_BASE_URL).rstrip("/")
        self.model = model or settings.LLM_MODEL
        self.force_json = settings.LLM_FORCE_JSON if force_json is None else force_json
        self._client = client

    def _build_body(self, prompt: str, max_tokens: int) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
        }
        if self.force_json:
            body["response_format"] = {"type": "json_object"}
        return body

    async def complete(self, prompt: str, *, timeout: float, max_tokens: int) -> str:
        if not self.api_key:
            raise UpstreamDegraded("generation", "api key not configured")

        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = self._build_body(prompt, max_tokens)

        try:
            if self._client is not None:
                response = await self._client.post(url, json=body, headers=headers, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.post(url, json=body, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException:
            raise UpstreamDegraded("generation", "timeout")
        except httpx.HTTPStatusError as e:
            # Only the error code is kept; raw upstream bodies never leave this module
            code = _error_code(e.response)
            if code == "insufficient_balance":
                logger.critical("generation_balance_exhausted", upstream_status=e.response.status_code)
            raise UpstreamDegraded(
                "generation",
                f"http status error: {code}",
                e.response.status_code,
            )
        except httpx.HTTPError as e:
            raise UpstreamDegraded("generation", f"transport error: {e.__class__.__name__}")
        except ValueError:
            raise UpstreamDegraded("generation", "response body is not JSON")

        return extract_content(data)


def extract_content(data: Any) -> str:
    """Pull ``choices[0].message.content`` out of a chat completions envelope."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise UpstreamDegraded("generation", "response envelope has no message content")
    if not isinstance(content, str) or not content.strip():
        raise UpstreamDegraded("generation", "empty message content")
    return content


def _error_code(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return "unknown"
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str):
            return error
        if isinstance(error, dict):
            return str(error.get("code") or error.get("type") or "unknown")
    return "unknown"
