"""Template management API routes.

Handles template upload, listing, retrieval, deletion, filling and preview.
"""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from smartdoc.api.deps import (
    get_app_settings,
    get_field_store,
    get_renderer,
    get_scanner,
    require_api_key,
)
from smartdoc.api.responses import docx_response
from smartdoc.api.schemas import (
    FillFieldsRequest,
    PreviewResponse,
    TemplateDetailResponse,
    TemplateListResponse,
    TemplateSummaryResponse,
)
from smartdoc.core.config import Settings
from smartdoc.interfaces.errors import NoPlaceholdersFound, SmartDocError
from smartdoc.interfaces.field_store import BaseFieldStore, TemplateRecord
from smartdoc.strategies.template_engine import (
    PlaceholderScanner,
    TemplateRenderer,
    extract_paragraphs,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/templates",
    tags=["templates"],
    dependencies=[Depends(require_api_key)],
)


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "",
    response_model=TemplateDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_template(
    file: UploadFile = File(..., description="The .docx template"),
    scanner: PlaceholderScanner = Depends(get_scanner),
    store: BaseFieldStore = Depends(get_field_store),
    settings: Settings = Depends(get_app_settings),
) -> TemplateDetailResponse:
    """Upload a template and derive its placeholder fields.

    Args:
        file: The Word document (.docx) to store.
        scanner: Placeholder scanner.
        store: Configured field store.
        settings: Application settings.

    Returns:
        TemplateDetailResponse with the assigned id and detected fields.

    Raises:
        HTTPException: If the file type or size is not accepted.
        MalformedPackageError: If the file is not a readable .docx.
        NoPlaceholdersFound: If the template has no {placeholders}.
    """
    try:
        logger.info(f"Starting template upload: {file.filename}")

        if not file.filename or not file.filename.lower().endswith(".docx"):
            raise HTTPException(
                status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
                detail="Only .docx files are supported",
            )

        content = await file.read()
        if len(content) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Template exceeds {settings.max_upload_bytes} bytes",
            )

        fields = await run_in_threadpool(scanner.scan_bytes, content)
        if not fields:
            raise NoPlaceholdersFound(
                "No placeholders detected. Ensure format is {placeholderName}."
            )

        record = TemplateRecord.create(
            name=Path(file.filename).name,
            content=content,
            fields=fields,
        )
        await store.put(record)

        logger.info(f"Template uploaded: {record.id} ({len(fields)} fields)")
        return TemplateDetailResponse.from_record(record)

    except (HTTPException, SmartDocError):
        raise
    except Exception as e:
        logger.error(f"Template upload failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Template upload failed: {str(e)}",
        ) from e


@router.get(
    "",
    response_model=TemplateListResponse,
    status_code=status.HTTP_200_OK,
)
async def list_templates(
    store: BaseFieldStore = Depends(get_field_store),
) -> TemplateListResponse:
    """List all stored templates, newest first."""
    summaries = await store.list()
    logger.info(f"Retrieved {len(summaries)} templates")
    return TemplateListResponse(
        templates=[TemplateSummaryResponse.from_summary(s) for s in summaries],
        total=len(summaries),
    )


@router.get(
    "/{template_id}",
    response_model=TemplateDetailResponse,
    status_code=status.HTTP_200_OK,
)
async def get_template(
    template_id: str,
    store: BaseFieldStore = Depends(get_field_store),
) -> TemplateDetailResponse:
    """Retrieve a stored template's metadata and fields."""
    record = await store.get(template_id)
    return TemplateDetailResponse.from_record(record)


@router.get("/{template_id}/download")
async def download_template(
    template_id: str,
    store: BaseFieldStore = Depends(get_field_store),
) -> Response:
    """Download the original, unfilled template."""
    record = await store.get(template_id)
    return docx_response(record.content, record.name)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: str,
    store: BaseFieldStore = Depends(get_field_store),
) -> Response:
    """Delete a stored template."""
    await store.delete(template_id)
    logger.info(f"Template deleted: {template_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{template_id}/fill")
async def fill_template(
    template_id: str,
    request: FillFieldsRequest,
    store: BaseFieldStore = Depends(get_field_store),
    renderer: TemplateRenderer = Depends(get_renderer),
) -> Response:
    """Fill a stored template and return the completed document.

    Args:
        template_id: ID of the stored template.
        request: Field values.
        store: Configured field store.
        renderer: Template renderer.

    Returns:
        The filled .docx as an attachment named ``filled_<name>``.
    """
    record = await store.get(template_id)
    output = await run_in_threadpool(renderer.render_bytes, record.content, request.fields)

    logger.info(f"Filled template {template_id} with {len(request.fields)} fields")
    return docx_response(output, f"filled_{record.name}")


@router.post(
    "/{template_id}/preview",
    response_model=PreviewResponse,
    status_code=status.HTTP_200_OK,
)
async def preview_template(
    template_id: str,
    request: FillFieldsRequest,
    store: BaseFieldStore = Depends(get_field_store),
    renderer: TemplateRenderer = Depends(get_renderer),
) -> PreviewResponse:
    """Fill a stored template and return its paragraph text."""
    record = await store.get(template_id)
    output = await run_in_threadpool(renderer.render_bytes, record.content, request.fields)
    paragraphs = await run_in_threadpool(extract_paragraphs, output)
    return PreviewResponse(template_id=template_id, paragraphs=paragraphs)
