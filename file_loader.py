"""
File loading utilities for chat, email and PDF exports.
"""
import os
import logging
from typing import Optional, Union
from pathlib import Path

logger = logging.getLogger(__name__)


class FileLoader:
    """Reads an export fully into memory before any parser runs."""

    SUPPORTED_EXTENSIONS = {
        'whatsapp': {'.txt'},
        'email': {'.txt', '.eml'},
        'telegram': {'.txt', '.json'},
        'pdf': {'.pdf'},
    }

    ENCODINGS = ['utf-8-sig', 'cp1252', 'latin1']

    def __init__(self, max_bytes: Optional[int] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.max_bytes = max_bytes

    def load_file(self, file_path: str, source: str = 'whatsapp',
                  any_extension: bool = False) -> Union[str, bytes]:
        """
        Load an export for the given source.

        Args:
            file_path: Path to the file
            source: Source kind; PDF content is returned as bytes, everything else as text
            any_extension: Skip the per-source extension check (custom templates)

        Returns:
            File content as str, or bytes for PDF
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        file_ext = Path(file_path).suffix.lower()
        allowed = self.SUPPORTED_EXTENSIONS.get(source, self.SUPPORTED_EXTENSIONS['whatsapp'])
        if not any_extension and file_ext not in allowed:
            raise ValueError(
                f"Unsupported file type for {source}: {file_ext} (expected {', '.join(sorted(allowed))})"
            )

        size = os.path.getsize(file_path)
        if self.max_bytes is not None and size > self.max_bytes:
            raise ValueError(f"File too large: {file_path} ({size} bytes, limit {self.max_bytes})")

        self.logger.info(f"Loading {source} file: {file_path}")

        with open(file_path, 'rb') as f:
            data = f.read()

        if source == 'pdf' and not any_extension:
            return data
        return self._decode(data, file_path)

    def _decode(self, data: bytes, file_path: str) -> str:
        """Decode text trying the known export encodings in turn."""
        for encoding in self.ENCODINGS:
            try:
                text = data.decode(encoding)
                self.logger.debug(f"Decoded {file_path} with {encoding} encoding")
                return text
            except UnicodeDecodeError:
                continue

        raise ValueError(f"Could not decode file with any of the tried encodings: {self.ENCODINGS}")
