"""Local directory field store.

Keeps each template as ``<id>.docx`` with a ``<id>.json`` metadata file
beside it. Suited to single-node deployments and development.
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from smartdoc.interfaces.errors import FieldStoreUnavailable, TemplateNotFoundError
from smartdoc.interfaces.field_store import BaseFieldStore, TemplateRecord, TemplateSummary
from smartdoc.strategies.field_stores.metadata import TemplateMetadata, is_valid_template_id

logger = logging.getLogger(__name__)


class LocalFieldStore(BaseFieldStore):
    """Field store backed by a local directory.

    Attributes:
        root: Directory holding template content and metadata files.
    """

    def __init__(self, root: str | Path) -> None:
        """Initialize the store, creating the directory if needed.

        Args:
            root: Directory for template files.
        """
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"LocalFieldStore initialized at {self.root}")

    def _content_path(self, template_id: str) -> Path:
        return self.root / f"{template_id}.docx"

    def _metadata_path(self, template_id: str) -> Path:
        return self.root / f"{template_id}.json"

    def _load_metadata(self, path: Path) -> TemplateMetadata:
        return TemplateMetadata.model_validate_json(path.read_text(encoding="utf-8"))

    async def put(self, record: TemplateRecord) -> str:
        if not is_valid_template_id(record.id):
            raise ValueError(f"Invalid template id: {record.id!r}")

        metadata = TemplateMetadata.from_record(record)
        try:
            self._content_path(record.id).write_bytes(record.content)
            self._metadata_path(record.id).write_text(
                metadata.model_dump_json(), encoding="utf-8"
            )
        except OSError as e:
            logger.error(f"Failed to write template {record.id}: {e}", exc_info=True)
            raise FieldStoreUnavailable(f"Local storage write failed: {e}") from e

        logger.info(f"Stored template {record.id} ({record.name}, {len(record.fields)} fields)")
        return record.id

    async def get(self, template_id: str) -> TemplateRecord:
        if not is_valid_template_id(template_id):
            raise TemplateNotFoundError(template_id)

        metadata_path = self._metadata_path(template_id)
        content_path = self._content_path(template_id)
        if not metadata_path.exists() or not content_path.exists():
            raise TemplateNotFoundError(template_id)

        try:
            metadata = self._load_metadata(metadata_path)
            content = content_path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read template {template_id}: {e}", exc_info=True)
            raise FieldStoreUnavailable(f"Local storage read failed: {e}") from e
        except ValidationError as e:
            # list() skips such records, so get() treats them as absent
            logger.error(f"Corrupt metadata for template {template_id}: {e}")
            raise TemplateNotFoundError(template_id) from e

        return metadata.to_record(content)

    async def delete(self, template_id: str) -> None:
        if not is_valid_template_id(template_id):
            raise TemplateNotFoundError(template_id)

        metadata_path = self._metadata_path(template_id)
        if not metadata_path.exists():
            raise TemplateNotFoundError(template_id)

        try:
            metadata_path.unlink()
            self._content_path(template_id).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete template {template_id}: {e}", exc_info=True)
            raise FieldStoreUnavailable(f"Local storage delete failed: {e}") from e

        logger.info(f"Deleted template {template_id}")

    async def list(self) -> list[TemplateSummary]:
        summaries = []
        for path in self.root.glob("*.json"):
            try:
                summaries.append(self._load_metadata(path).to_summary())
            except (OSError, ValidationError) as e:
                logger.warning(f"Skipping unreadable metadata {path.name}: {e}")

        summaries.sort(key=lambda s: s.uploaded_at, reverse=True)
        return summaries
