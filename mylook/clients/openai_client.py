"""Async wrapper around the OpenAI Responses API."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import httpx
from openai import AsyncOpenAI

from mylook.errors import NetworkFailure

logger = logging.getLogger(__name__)


class OpenAIClient:
    """Sends stylist prompts and returns the model's plain text answer."""

    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._client.aclose()

    async def _request_json(
        self,
        method: str,
        endpoint: str,
        *,
        api_key: str,
        json_body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(
                method,
                endpoint,
                json=json_body,
                headers={"Authorization": f"Bearer {api_key}"},
            )
            response.raise_for_status()
            if not response.content:
                return {}
            payload = response.json()
        except httpx.TimeoutException as exc:
            raise NetworkFailure("OpenAI request timed out.") from exc
        except httpx.HTTPStatusError as exc:
            raise NetworkFailure(
                f"OpenAI {exc.response.status_code} {exc.response.text[:200]}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise NetworkFailure(f"OpenAI request failed: {exc}") from exc
        return payload if isinstance(payload, dict) else {}

    async def create_response(
        self,
        *,
        api_key: str,
        model: str,
        input: str | Sequence[Mapping[str, Any]],
        max_output_tokens: int = 400,
    ) -> str:
        """Call ``/responses`` and return the concatenated output text."""

        payload = {
            "model": model,
            "input": input if isinstance(input, str) else list(input),
            "max_output_tokens": max_output_tokens,
        }
        result = await self._request_json("POST", "/responses", api_key=api_key, json_body=payload)
        return self.extract_response_text(result)

    async def ping(self, api_key: str) -> bool:
        """Return ``True`` if the upstream service responds to a model listing call."""

        client = AsyncOpenAI(api_key=api_key, base_url=self._base_url)
        try:
            models = await client.models.list()
            return bool(models.data)
        finally:
            await client.close()

    @staticmethod
    def extract_response_text(payload: Mapping[str, Any]) -> str:
        """Pull the text out of a Responses API payload."""

        output_text = payload.get("output_text")
        if isinstance(output_text, str) and output_text:
            return output_text

        parts: list[str] = []
        for entry in payload.get("output") or []:
            if not isinstance(entry, Mapping):
                continue
            for chunk in entry.get("content") or []:
                if (
                    isinstance(chunk, Mapping)
                    and chunk.get("type") == "output_text"
                    and chunk.get("text")
                ):
                    parts.append(str(chunk["text"]))
        return "\n".join(parts).strip()
