import os
import random
import re
import time
from pathlib import Path, PurePath
from typing import BinaryIO, Optional, Union
from app.settings import settings
import logging

log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]+$")

class SizeLimitExceeded(Exception):
    """Raised when a stream grows past the allowed number of bytes."""
    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes
        super().__init__(f"stream exceeded {max_bytes} bytes")

def generate_filename(original_name: str) -> str:
    """
        Storage filename for an upload: ``<epoch ms>-<random>[.ext]``.
        Only a plain alphanumeric extension of the original name survives.
    """
    suffix = PurePath(original_name.replace("\\", "/")).suffix if original_name else ""
    ext = suffix if _SAFE_EXTENSION.match(suffix) else ""
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**12)}"
    return unique_suffix + ext

def resolve_destination(upload_dir: Union[str, Path], filename: str) -> Path:
    """Absolute on-disk path for a storage filename."""
    return Path(upload_dir).resolve() / filename

# -------------------------
# Local Storage Service
# -------------------------
class LocalStorageService:
    def __init__(self, upload_dir: Optional[Union[str, Path]] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        log.info("Initialized local storage at %s", self.upload_dir)

        # Ensure directory exists at initialization
        self.ensure_directory()

    def ensure_directory(self):
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        log.debug("Upload directory %s ready", self.upload_dir)

    def save(self, fileobj: BinaryIO, filename: str, max_bytes: Optional[int] = None) -> int:
        """
            Streams ``fileobj`` to ``<upload_dir>/<filename>`` and returns the byte count.
            Partial output is removed if the copy fails or passes ``max_bytes``.
        """
        destination = resolve_destination(self.upload_dir, filename)
        written = 0
        # "x" refuses to overwrite another upload's file
        out = open(destination, "xb")
        try:
            with out:
                while True:
                    chunk = fileobj.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise SizeLimitExceeded(max_bytes)
                    out.write(chunk)
        except BaseException:
            self._discard(destination)
            raise
        log.debug("Wrote %d bytes to %s", written, destination)
        return written

    def _discard(self, path: Path):
        try:
            os.remove(path)
            log.debug("Removed partial file %s", path)
        except FileNotFoundError:
            pass

    def close(self):
        log.info("Closed local storage")
