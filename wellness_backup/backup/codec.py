"""
Archive codec for backup containers.

A backup is either a UTF-8 JSON document or a zip archive holding that
document as a single entry. The container is recognized by its magic
bytes, never by file extension.
"""

import io
import logging
import zipfile
import zlib

from wellness_backup.core.exceptions import FormatError


logger = logging.getLogger(__name__)

ZIP_MAGIC_PREFIXES = (b"PK\x03\x04", b"PK\x05\x06")
UTF8_BOM = b"\xef\xbb\xbf"
DEFAULT_ENTRY_NAME = "backup.json"


class ArchiveCodec:
    """Encodes backup documents to bytes and decodes them back."""

    def __init__(self, entry_name: str = DEFAULT_ENTRY_NAME):
        self.entry_name = entry_name

    @staticmethod
    def is_archive(data: bytes) -> bool:
        """Whether ``data`` starts with zip magic bytes."""
        return any(data.startswith(prefix) for prefix in ZIP_MAGIC_PREFIXES)

    def decode(self, data: bytes) -> str:
        """
        Decode a backup container into its JSON text.

        Args:
            data: Raw bytes of a zip archive or a plain JSON document

        Returns:
            The JSON document as text

        Raises:
            FormatError: If the archive is broken, lacks the backup entry,
                or the text is not valid UTF-8
        """
        if self.is_archive(data):
            logger.debug(f"Detected zip archive ({len(data)} bytes)")
            data = self._extract(data)

        if data.startswith(UTF8_BOM):
            data = data[len(UTF8_BOM):]

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError(f"Backup is not valid UTF-8 text: {e}")

    def _extract(self, data: bytes) -> bytes:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                try:
                    return archive.read(self.entry_name)
                except KeyError:
                    raise FormatError(
                        f"Archive does not contain '{self.entry_name}'",
                        details={"entries": archive.namelist()}
                    )
        except (
            zipfile.BadZipFile, zlib.error, EOFError,
            RuntimeError, NotImplementedError
        ) as e:
            # RuntimeError: encrypted entry, NotImplementedError: unsupported compression
            raise FormatError(f"Unreadable backup archive: {e}")

    def encode(self, text: str) -> bytes:
        """Wrap a JSON document in a zip archive with one deflated entry."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(self.entry_name, text.encode("utf-8"))
        encoded = buffer.getvalue()
        logger.debug(f"Compressed {len(text)} characters into {len(encoded)} bytes")
        return encoded

    @staticmethod
    def encode_plain(text: str) -> bytes:
        """Encode a JSON document as plain UTF-8 bytes."""
        return text.encode("utf-8")
