import base64
import logging
import os
import random
import re
import time
from pathlib import Path
from typing import List, Optional

from .errors import InvalidInput, StorageFailure

logger = logging.getLogger(__name__)

PNG_DATA_URL_PREFIX = "data:image/png;base64,"

_NON_ALPHABET = re.compile(r"[^A-Za-z0-9+/]")


def drawing_filename(now_ms: Optional[int] = None, rand: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if rand is None:
        rand = random.randrange(10000)
    return f"drawing_{now_ms}_{rand}.png"


def decode_payload(payload) -> bytes:
    """
    Turn a ``data:image/png;base64,...`` payload into raw bytes.

    Decoding never fails once the prefix is present. Decoding stops at the
    first padding character. URL-safe characters are read as their standard
    equivalents. Any other character outside the alphabet is dropped, and so
    is a dangling final character. Sloppy input can therefore decode to a
    corrupt file.

    Raises:
        InvalidInput: payload missing, empty, or without the PNG data URL prefix
    """
    if not payload or not isinstance(payload, str):
        raise InvalidInput()
    if not payload.startswith(PNG_DATA_URL_PREFIX):
        raise InvalidInput()

    encoded = payload[len(PNG_DATA_URL_PREFIX):].split("=", 1)[0]
    encoded = _NON_ALPHABET.sub("", encoded.replace("-", "+").replace("_", "/"))
    if len(encoded) % 4 == 1:
        encoded = encoded[:-1]
    return base64.b64decode(encoded + "=" * (-len(encoded) % 4))


def save_drawing(payload, drawings_dir: Path) -> str:
    """
    Persist an uploaded drawing under a freshly generated name.

    Args:
        payload: data URL string sent by the client
        drawings_dir: directory holding all drawings

    Returns:
        The generated filename (no directory part).
    """
    data = decode_payload(payload)
    filename = drawing_filename()
    path = Path(drawings_dir) / filename

    try:
        os.makedirs(drawings_dir, exist_ok=True)
        # Same-millisecond collisions with the same random suffix overwrite.
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        logger.error(f"Failed to write {path}: {e}")
        raise StorageFailure()

    logger.info(f"Saved drawing {filename} ({len(data)} bytes)")
    return filename


def list_drawings(drawings_dir: Path) -> List[Path]:
    """PNG files in the drawings directory, in directory listing order."""
    try:
        names = os.listdir(drawings_dir)
    except FileNotFoundError:
        return []
    return [Path(drawings_dir) / name for name in names if name.endswith(".png")]
