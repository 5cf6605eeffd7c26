import asyncio
import io
import logging
import math
from pathlib import Path
from typing import List, Sequence, Tuple

from PIL import Image, ImageOps

from .aio import gather_or_fail
from .errors import EncodingFailure, NotFound, ProcessingFailure
from .storage import list_drawings

logger = logging.getLogger(__name__)

CELL_SIZE = 200
BACKGROUND = (255, 255, 255, 255)


def grid_shape(n: int) -> Tuple[int, int]:
    """
    Smallest roughly-square grid holding ``n`` cells, never taller than wide.

    Returns:
        (cols, rows)
    """
    if n <= 0:
        raise ValueError("grid needs at least one cell")
    cols = math.ceil(math.sqrt(n))
    rows = math.ceil(n / cols)
    return cols, rows


def cover(image: Image.Image, size: int) -> Image.Image:
    """
    Scale uniformly until the image covers a ``size`` x ``size`` cell, then
    crop the overflow around the center. Aspect ratio is preserved.
    """
    return ImageOps.fit(
        image.convert("RGBA"),
        (size, size),
        method=Image.BILINEAR,
        centering=(0.5, 0.5),
    )


def tile(images: Sequence[Image.Image], cell_size: int = CELL_SIZE) -> Image.Image:
    """Lay images left-to-right, top-to-bottom on a white canvas."""
    cols, rows = grid_shape(len(images))
    canvas = Image.new("RGBA", (cell_size * cols, cell_size * rows), BACKGROUND)

    for i, image in enumerate(images):
        x = (i % cols) * cell_size
        y = (i // cols) * cell_size
        canvas.alpha_composite(cover(image, cell_size), dest=(x, y))

    return canvas


def load_image(path: Path) -> Image.Image:
    # Image.open is lazy; load() forces the full decode so bad files fail here.
    with Image.open(path) as image:
        image.load()
        return image.copy()


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    try:
        image.save(buf, format="PNG")
    except (OSError, ValueError) as e:
        logger.error(f"PNG encoding failed: {e}")
        raise EncodingFailure()
    return buf.getvalue()


def render_collage(images: Sequence[Image.Image], cell_size: int = CELL_SIZE) -> bytes:
    return encode_png(tile(images, cell_size))


async def load_images(paths: List[Path]) -> List[Image.Image]:
    return await gather_or_fail(asyncio.to_thread(load_image, p) for p in paths)


async def compose_collage(drawings_dir: Path, cell_size: int = CELL_SIZE) -> bytes:
    """
    Build a grid collage of every drawing currently on disk.

    Args:
        drawings_dir: directory holding the drawings
        cell_size: edge length of each square cell in pixels

    Returns:
        PNG bytes of the collage

    Raises:
        NotFound: no drawings stored
        ProcessingFailure: any drawing could not be decoded
        EncodingFailure: the canvas could not be written as PNG
    """
    paths = list_drawings(drawings_dir)
    if not paths:
        raise NotFound()

    try:
        images = await load_images(paths)
    except Exception as e:
        logger.error(f"Could not load drawings for collage: {e}")
        raise ProcessingFailure()

    png = await asyncio.to_thread(render_collage, images, cell_size)

    cols, rows = grid_shape(len(images))
    logger.info(f"Composed collage of {len(images)} drawings ({cols}x{rows} grid, {cols * cell_size}x{rows * cell_size})")
    return png
