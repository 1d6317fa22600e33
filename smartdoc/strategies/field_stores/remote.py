"""Remote object storage field store.

Talks to a Supabase Storage bucket over its REST API. Each template is
kept as two objects:

- ``templates/<id>_<name>``: the .docx content
- ``meta/<id>.json``: name, fields and upload time

Content objects are located by listing the ``templates/`` folder and
matching the ``<id>_`` prefix.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from smartdoc.interfaces.errors import FieldStoreUnavailable, TemplateNotFoundError
from smartdoc.interfaces.field_store import BaseFieldStore, TemplateRecord, TemplateSummary
from smartdoc.interfaces.template import DOCX_MEDIA_TYPE
from smartdoc.strategies.field_stores.metadata import TemplateMetadata, is_valid_template_id

logger = logging.getLogger(__name__)

CONTENT_FOLDER = "templates"
METADATA_FOLDER = "meta"
LIST_PAGE_SIZE = 1000


class RemoteFieldStore(BaseFieldStore):
    """Field store backed by a Supabase Storage bucket.

    Attributes:
        bucket: Name of the storage bucket.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        bucket: str = "templates",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the remote store.

        Args:
            url: Supabase project URL (e.g., "https://xyz.supabase.co").
            api_key: Service or anon key with access to the bucket.
            bucket: Storage bucket holding the templates.
            timeout: Request timeout in seconds.
            client: Optional preconfigured HTTP client.
        """
        self.bucket = bucket
        self._client = client or httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/storage/v1",
            headers={
                "Authorization": f"Bearer {api_key}",
                "apikey": api_key,
            },
            timeout=timeout,
        )
        logger.info(f"RemoteFieldStore initialized for bucket '{bucket}'")

    # =========================================================================
    # HTTP helpers
    # =========================================================================

    def _object_url(self, path: str) -> str:
        return f"/object/{quote(self.bucket)}/{quote(path, safe='/')}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, mapping transport and server failures.

        Raises:
            FieldStoreUnavailable: On connection errors, timeouts, auth
                failures or 5xx responses.
        """
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"Field store request failed: {method} {url}: {e}")
            raise FieldStoreUnavailable(f"Field store unreachable: {e}") from e

        if response.status_code >= 500 or response.status_code in (401, 403):
            logger.error(
                f"Field store returned {response.status_code} for {method} {url}: "
                f"{response.text[:200]}"
            )
            raise FieldStoreUnavailable(
                f"Field store error: HTTP {response.status_code}"
            )
        return response

    @staticmethod
    def _is_missing(response: httpx.Response) -> bool:
        # Storage reports missing objects as 404, or as 400 with a not-found body
        if response.status_code == 404:
            return True
        return response.status_code == 400 and "not found" in response.text.lower()

    async def _download(self, path: str, template_id: str) -> bytes:
        response = await self._request("GET", self._object_url(path))
        if self._is_missing(response):
            raise TemplateNotFoundError(template_id)
        if response.is_error:
            raise FieldStoreUnavailable(
                f"Download of '{path}' failed: HTTP {response.status_code}"
            )
        return response.content

    async def _upload(self, path: str, data: bytes, content_type: str) -> None:
        response = await self._request(
            "POST",
            self._object_url(path),
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "true"},
        )
        if response.is_error:
            raise FieldStoreUnavailable(
                f"Upload of '{path}' failed: HTTP {response.status_code}"
            )

    async def _remove(self, paths: list[str]) -> None:
        response = await self._request(
            "DELETE",
            f"/object/{quote(self.bucket)}",
            json={"prefixes": paths},
        )
        if response.is_error:
            raise FieldStoreUnavailable(f"Delete failed: HTTP {response.status_code}")

    async def _list_folder(self, folder: str, search: str = "") -> list[str]:
        """Return the object names (relative to the folder) in a folder."""
        names: list[str] = []
        offset = 0
        while True:
            response = await self._request(
                "POST",
                f"/object/list/{quote(self.bucket)}",
                json={
                    "prefix": folder,
                    "search": search,
                    "limit": LIST_PAGE_SIZE,
                    "offset": offset,
                    "sortBy": {"column": "name", "order": "asc"},
                },
            )
            if response.is_error:
                raise FieldStoreUnavailable(
                    f"Listing '{folder}' failed: HTTP {response.status_code}"
                )

            page = response.json()
            names.extend(item["name"] for item in page if item.get("name"))
            if len(page) < LIST_PAGE_SIZE:
                return names
            offset += LIST_PAGE_SIZE

    async def _find_content_path(self, template_id: str) -> str | None:
        prefix = f"{template_id}_"
        for name in await self._list_folder(CONTENT_FOLDER, search=prefix):
            if name.startswith(prefix):
                return f"{CONTENT_FOLDER}/{name}"
        return None

    # =========================================================================
    # BaseFieldStore
    # =========================================================================

    async def put(self, record: TemplateRecord) -> str:
        if not is_valid_template_id(record.id):
            raise ValueError(f"Invalid template id: {record.id!r}")

        object_name = record.name.replace("/", "_")
        content_path = f"{CONTENT_FOLDER}/{record.id}_{object_name}"
        previous = await self._find_content_path(record.id)

        metadata = TemplateMetadata.from_record(record)
        await self._upload(content_path, record.content, DOCX_MEDIA_TYPE)
        await self._upload(
            f"{METADATA_FOLDER}/{record.id}.json",
            metadata.model_dump_json().encode("utf-8"),
            "application/json",
        )

        # A replace under a new name leaves the old content object behind
        if previous and previous != content_path:
            await self._remove([previous])

        logger.info(f"Uploaded template {record.id} ({record.name}) to bucket '{self.bucket}'")
        return record.id

    async def get(self, template_id: str) -> TemplateRecord:
        if not is_valid_template_id(template_id):
            raise TemplateNotFoundError(template_id)

        content_path = await self._find_content_path(template_id)
        if content_path is None:
            raise TemplateNotFoundError(template_id)

        results = await asyncio.gather(
            self._download(content_path, template_id),
            self._download(f"{METADATA_FOLDER}/{template_id}.json", template_id),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        content, raw_metadata = results

        try:
            metadata = TemplateMetadata.model_validate_json(raw_metadata)
        except ValidationError as e:
            # list() skips such records, so get() treats them as absent
            logger.error(f"Corrupt metadata for template {template_id}: {e}")
            raise TemplateNotFoundError(template_id) from e
        return metadata.to_record(content)

    async def delete(self, template_id: str) -> None:
        if not is_valid_template_id(template_id):
            raise TemplateNotFoundError(template_id)

        content_path = await self._find_content_path(template_id)
        if content_path is None:
            raise TemplateNotFoundError(template_id)

        await self._remove([content_path, f"{METADATA_FOLDER}/{template_id}.json"])
        logger.info(f"Deleted template {template_id} from bucket '{self.bucket}'")

    async def close(self) -> None:
        await self._client.aclose()

    async def list(self) -> list[TemplateSummary]:
        names = [
            name
            for name in await self._list_folder(METADATA_FOLDER)
            if name.endswith(".json")
        ]
        payloads = await asyncio.gather(
            *(
                self._download(f"{METADATA_FOLDER}/{name}", name.removesuffix(".json"))
                for name in names
            ),
            return_exceptions=True,
        )

        summaries = []
        for name, payload in zip(names, payloads):
            if isinstance(payload, TemplateNotFoundError):
                # Deleted between listing and download
                continue
            if isinstance(payload, BaseException):
                raise payload
            try:
                summaries.append(TemplateMetadata.model_validate_json(payload).to_summary())
            except ValidationError as e:
                logger.warning(f"Skipping unreadable metadata {name}: {e}")

        summaries.sort(key=lambda s: s.uploaded_at, reverse=True)
        return summaries
