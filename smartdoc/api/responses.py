"""Helpers for binary document responses."""

from urllib.parse import quote

from fastapi.responses import Response

from smartdoc.interfaces.template import DOCX_MEDIA_TYPE


def docx_response(content: bytes, filename: str) -> Response:
    """Build an attachment response for a .docx payload.

    Args:
        content: Document bytes.
        filename: Download filename; non-ASCII names are sent RFC 5987 encoded.
    """
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace('"', "_")
    disposition = f'attachment; filename="{ascii_name}"'
    if ascii_name != filename:
        disposition += f"; filename*=UTF-8''{quote(filename)}"

    return Response(
        content=content,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": disposition},
    )
