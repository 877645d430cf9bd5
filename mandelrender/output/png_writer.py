from __future__ import annotations

import io
import os
import tempfile

from PIL import Image

from mandelrender.util.logging_setup import get_logger

MIME_TYPE = "image/png"

class OutputError(RuntimeError):
    """The raster was rendered but could not be encoded or delivered."""

def encode_png(img: Image.Image) -> bytes:
    try:
        bio = io.BytesIO()
        img.save(bio, format="PNG")
    except Exception as e:
        raise OutputError(f"Failed to encode PNG: {e}") from e
    return bio.getvalue()

def write_png(img: Image.Image, path: str) -> str:
    """
    Encode ``img`` and write it to ``path``.

    The bytes go to a temporary file in the destination directory which
    is then renamed over ``path``, so a failure never leaves a truncated
    image behind.
    """
    logger = get_logger()
    data = encode_png(img)
    target = os.path.abspath(path)
    directory = os.path.dirname(target)

    try:
        fd, tmp = tempfile.mkstemp(prefix=".mandelrender-", suffix=".png", dir=directory)
    except OSError as e:
        raise OutputError(f"Cannot create output file in {directory}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
        os.chmod(tmp, 0o644)
        os.replace(tmp, target)
    except OSError as e:
        try:
            os.unlink(tmp)
        except OSError:
            logger.warning("Could not remove temporary file %s", tmp)
        raise OutputError(f"Failed to write {target}: {e}") from e

    logger.info("Image written: %s (%s bytes)", target, len(data))
    return target
