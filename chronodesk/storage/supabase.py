"""Supabase Storage adapter for the ObjectStore protocol.

Talks to the Storage REST API of a Supabase project with a service-role
key. Listing is a single request capped at ``list_limit`` names; buckets
holding more objects than that are only partially visible to revision
naming.
"""

from __future__ import annotations

import typing as typ
import urllib.parse

import httpx
import msgspec

from chronodesk.errors import UploadError

if typ.TYPE_CHECKING:
    from chronodesk.storage.config import SupabaseStorageConfig

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_CONFLICT = 409


class StoredObject(msgspec.Struct, kw_only=True):
    """Entry of a Storage ``object/list`` response."""

    name: str
    id: str | None = None


class SupabaseObjectStore:
    """Upload statements to a Supabase Storage bucket.

    Parameters
    ----------
    config
        Project URL, service key, bucket and listing cap.
    http_client
        Optional ``httpx.AsyncClient`` for testing. If not provided, the
        instance creates and owns its own client.

    """

    def __init__(
        self,
        config: SupabaseStorageConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the adapter with configuration."""
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)
        self._headers = {
            "Authorization": f"Bearer {config.service_key}",
            "apikey": config.service_key,
        }

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    def _object_url(self, *parts: str) -> str:
        base = self._config.url.rstrip("/")
        quoted = "/".join(urllib.parse.quote(part, safe="") for part in parts)
        return f"{base}/storage/v1/object/{quoted}"

    async def list_names(self, prefix: str = "") -> list[str]:
        """Return object names in the bucket root starting with ``prefix``.

        Raises
        ------
        UploadError
            If the listing request fails or returns an unexpected payload.

        """
        url = self._object_url("list", self._config.bucket)
        payload = {
            "prefix": "",
            "limit": self._config.list_limit,
            "offset": 0,
            "sortBy": {"column": "name", "order": "asc"},
        }
        response = await self._send("list", url, json=payload, headers=self._headers)
        try:
            objects = msgspec.json.decode(response.content, type=list[StoredObject])
        except msgspec.DecodeError as exc:
            msg = f"Storage list returned an unexpected payload: {exc}"
            raise UploadError(msg) from exc
        return [obj.name for obj in objects if obj.name.startswith(prefix)]

    async def upload(
        self,
        name: str,
        content: bytes,
        *,
        content_type: str,
        upsert: bool,
    ) -> None:
        """Upload ``content`` as ``name`` into the bucket root.

        Raises
        ------
        UploadError
            If the name exists and ``upsert`` is false, or the request fails.

        """
        headers = {
            **self._headers,
            "Content-Type": content_type,
            "x-upsert": "true" if upsert else "false",
        }
        url = self._object_url(self._config.bucket, name)
        await self._send("upload", url, content=content, headers=headers, name=name)

    async def _send(
        self,
        operation: str,
        url: str,
        *,
        headers: dict[str, str],
        json: object | None = None,
        content: bytes | None = None,
        name: str | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.post(
                url, headers=headers, json=json, content=content
            )
        except httpx.RequestError as exc:
            raise UploadError.network_error(operation, str(exc)) from exc

        if response.status_code == _HTTP_CONFLICT and name is not None:
            raise UploadError.already_exists(name)
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise UploadError.http_error(operation, response.status_code)
        return response
