"""Document fill API route.

A single endpoint that fills either a template sent inline as base64 or a
template stored under an id, and streams back the completed document.
"""

import base64
import binascii
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from smartdoc.api.deps import api_key_matches, get_app_settings, get_factory, get_renderer
from smartdoc.api.responses import docx_response
from smartdoc.api.schemas import ErrorResponse, FillRequest
from smartdoc.core.config import Settings
from smartdoc.core.factory import ComponentFactory
from smartdoc.interfaces.errors import SmartDocError
from smartdoc.strategies.template_engine import TemplateRenderer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["fill"])


def decode_template(encoded: str) -> bytes:
    """Decode a base64 template, tolerating a data URL prefix.

    Raises:
        HTTPException: If the payload is not valid base64.
    """
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]

    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'template' must be a base64 encoded .docx file",
        ) from e


@router.post(
    "/fill",
    response_class=Response,
    responses={
        200: {"description": "The filled .docx document"},
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def fill_document(
    request: FillRequest,
    settings: Settings = Depends(get_app_settings),
    renderer: TemplateRenderer = Depends(get_renderer),
    factory: ComponentFactory = Depends(get_factory),
) -> Response:
    """Fill a template with field values.

    The template comes either inline (``template``, base64) or from the
    field store (``docID``). Inline fills do not touch the field store.

    Args:
        request: API key, template source and field values.
        settings: Application settings.
        renderer: Template renderer.
        factory: Component factory, used for the field store on stored fills.

    Returns:
        The filled .docx as ``generated.docx``.

    Raises:
        HTTPException: On a bad API key, invalid base64, an oversize template
            or unexpected failure.
    """
    try:
        if not api_key_matches(request.api_key, settings):
            logger.warning("Fill rejected: invalid API key")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized: Invalid API Key",
            )

        if request.template is not None:
            content = decode_template(request.template)
            if len(content) > settings.max_upload_bytes:
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=f"Template exceeds {settings.max_upload_bytes} bytes",
                )
            source = "inline"
        else:
            record = await factory.get_field_store().get(request.doc_id)
            content = record.content
            source = f"stored:{record.id}"

        output = await run_in_threadpool(renderer.render_bytes, content, request.fields)

        logger.info(f"Generated document from {source} template ({len(output)} bytes)")
        return docx_response(output, "generated.docx")

    except (HTTPException, SmartDocError):
        raise
    except Exception as e:
        logger.error(f"API generation error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Generation failed: {str(e)}",
        ) from e
