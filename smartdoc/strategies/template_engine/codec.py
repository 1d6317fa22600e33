"""OOXML package codec.

Treats a .docx container as an opaque mapping of entry paths to bytes.
Only the document body entry is ever decoded; styles, numbering, media and
relationship parts pass through untouched.
"""

import io
import logging
import zipfile
import zlib

from smartdoc.interfaces.errors import MalformedPackageError
from smartdoc.interfaces.template import BODY_ENTRY, TemplatePackage

logger = logging.getLogger(__name__)


class PackageCodec:
    """Opens, edits and re-packs OOXML containers held in memory."""

    def __init__(self, body_entry: str = BODY_ENTRY) -> None:
        """Initialize the codec.

        Args:
            body_entry: Entry path holding the document body XML.
        """
        self._body_entry = body_entry

    def open(self, data: bytes) -> TemplatePackage:
        """Parse the container's entry table.

        Args:
            data: Raw container bytes.

        Returns:
            The opened TemplatePackage.

        Directory entries are kept with empty content so the entry table
        survives a round trip.

        Raises:
            MalformedPackageError: If the bytes are not a readable ZIP
                container or the body entry is missing.
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                entries = {info.filename: archive.read(info) for info in archive.infolist()}
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            zlib.error,
            EOFError,
            NotImplementedError,  # unsupported compression method
            RuntimeError,  # encrypted entry
            ValueError,
        ) as e:
            raise MalformedPackageError(f"Not a valid .docx container: {e}") from e

        if self._body_entry not in entries:
            raise MalformedPackageError(
                f"Container has no '{self._body_entry}' entry"
            )

        logger.debug(f"Opened package with {len(entries)} entries")
        return TemplatePackage(entries=entries)

    def read_body(self, package: TemplatePackage) -> str:
        """Return the body entry decoded as UTF-8.

        Raises:
            MalformedPackageError: If the entry is missing or not UTF-8.
        """
        try:
            raw = package.entries[self._body_entry]
        except KeyError as e:
            raise MalformedPackageError(
                f"Container has no '{self._body_entry}' entry"
            ) from e

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedPackageError(
                f"'{self._body_entry}' is not valid UTF-8: {e}"
            ) from e

    def write_body(self, package: TemplatePackage, text: str) -> TemplatePackage:
        """Return a copy of the package with the body entry replaced.

        Every other entry is passed through byte-for-byte and entry order
        is preserved.

        Raises:
            MalformedPackageError: If the package has no body entry.
        """
        if self._body_entry not in package.entries:
            raise MalformedPackageError(
                f"Container has no '{self._body_entry}' entry"
            )

        entries = dict(package.entries)
        entries[self._body_entry] = text.encode("utf-8")
        return TemplatePackage(entries=entries)

    def serialize(self, package: TemplatePackage) -> bytes:
        """Re-pack all entries into a single .docx byte stream."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for name, data in package.entries.items():
                if name.endswith("/"):
                    # Directory entries are stored, never compressed
                    archive.writestr(name, b"", compress_type=zipfile.ZIP_STORED)
                else:
                    archive.writestr(name, data)
        return buffer.getvalue()
