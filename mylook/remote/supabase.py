"""Async client for the Supabase REST and Storage APIs."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import httpx

from mylook.errors import NetworkFailure
from mylook.imgproc.normalize import data_url_to_bytes
from mylook.remote.base import RemoteStore, UploadedImage, build_object_path

logger = logging.getLogger(__name__)


class SupabaseRemoteStore(RemoteStore):
    """Talks to PostgREST tables and a public storage bucket over HTTP."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        bucket: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url or not api_key:
            raise RuntimeError("Supabase URL and key must be configured.")
        self._base_url = base_url.rstrip("/")
        self._bucket = bucket
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            },
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._client.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method,
                endpoint,
                params=params,
                json=json_body,
                content=content,
                headers=headers,
            )
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except httpx.TimeoutException as exc:
            raise NetworkFailure(f"Supabase request {method} {endpoint} timed out.") from exc
        except httpx.HTTPStatusError as exc:
            raise NetworkFailure(
                f"Supabase returned {exc.response.status_code}: {exc.response.text[:200]}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise NetworkFailure(f"Supabase request {method} {endpoint} failed: {exc}") from exc

    async def fetch_all(self, table: str, order_by: str, *, descending: bool) -> list[dict[str, Any]]:
        direction = "desc" if descending else "asc"
        payload = await self._request(
            "GET",
            f"/rest/v1/{table}",
            params={"select": "*", "order": f"{order_by}.{direction}"},
        )
        if not isinstance(payload, list):
            raise NetworkFailure(f"Supabase returned an unexpected payload for {table}.")
        return [row for row in payload if isinstance(row, dict)]

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []
        payload = await self._request(
            "POST",
            f"/rest/v1/{table}",
            json_body=[dict(row) for row in rows],
            headers={"Prefer": "return=representation"},
        )
        return [row for row in payload or [] if isinstance(row, dict)]

    async def update(self, table: str, record_id: str, values: Mapping[str, Any]) -> None:
        await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params={"id": f"eq.{record_id}"},
            json_body=dict(values),
        )

    async def delete(self, table: str, record_id: str) -> None:
        await self._request("DELETE", f"/rest/v1/{table}", params={"id": f"eq.{record_id}"})

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self._bucket}/{path}"

    async def upload_image(self, data_url: str) -> UploadedImage:
        try:
            data, mime = data_url_to_bytes(data_url)
        except ValueError as exc:
            raise NetworkFailure(f"Photo cannot be uploaded: {exc}") from exc
        path = build_object_path(data_url)
        await self._request(
            "POST",
            f"/storage/v1/object/{self._bucket}/{path}",
            content=data,
            headers={"Content-Type": mime or "image/jpeg", "x-upsert": "false"},
        )
        logger.debug("Uploaded photo to %s", path)
        return UploadedImage(path=path, url=self.public_url(path))

    async def remove_image(self, path: str) -> None:
        await self._request(
            "DELETE",
            f"/storage/v1/object/{self._bucket}",
            json_body={"prefixes": [path]},
        )

    async def ping(self) -> bool:
        await self._request("GET", "/rest/v1/wardrobe_items", params={"select": "id", "limit": "1"})
        return True
