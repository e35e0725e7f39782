"""
Image I/O Utilities
===================

This module decodes eardrum photographs and corrects their orientation
before they reach the classifiers.

Functions
---------
load_image
    Decode a file path or raw bytes into a PIL image
read_orientation
    Read the EXIF orientation flag stored with an image
normalize_orientation
    Apply an orientation flag so pixel rows run top-to-bottom

Notes
-----
Orientation values follow the EXIF/TIFF numbering (1-8). Camera captures
and photo libraries usually leave the pixels as the sensor produced them
and record the rotation in this flag instead.

Decoding failures raise ``ImageDecodeError`` so callers can report a bad
input to the user instead of aborting.

See Also
--------
otofind_ui.core.runner : Normalizes orientation before dispatching models
"""

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

EXIF_ORIENTATION_TAG = 0x0112

# EXIF orientation -> transpose applied to get an upright image
_ORIENTATION_OPS = {
    1: None,
    2: Image.Transpose.FLIP_LEFT_RIGHT,
    3: Image.Transpose.ROTATE_180,
    4: Image.Transpose.FLIP_TOP_BOTTOM,
    5: Image.Transpose.TRANSPOSE,
    6: Image.Transpose.ROTATE_270,
    7: Image.Transpose.TRANSVERSE,
    8: Image.Transpose.ROTATE_90,
}


class ImageDecodeError(ValueError):
    """Raised when an image source cannot be decoded into pixels."""


def load_image(source: str | Path | bytes) -> Image.Image:
    """
    Decode an image from a path or from encoded bytes.

    The pixel data is read eagerly so truncated or corrupt files fail here
    and not later on a worker thread.

    Parameters
    ----------
    source : str, Path or bytes
        File path, or the encoded image (JPEG, PNG, ...)

    Returns
    -------
    PIL.Image
        Decoded image in its original mode, EXIF data preserved

    Raises
    ------
    ImageDecodeError
        If the source is missing, unreadable, or not a supported image

    Examples
    --------
    >>> img = load_image("eardrum.jpg")
    >>> img.size
    (3024, 4032)
    """
    label = "<bytes>" if isinstance(source, (bytes, bytearray)) else str(source)
    try:
        if isinstance(source, (bytes, bytearray)):
            img = Image.open(io.BytesIO(source))
        else:
            img = Image.open(Path(source))
        img.load()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ImageDecodeError(f"Unable to decode image {label}: {e}") from e
    return img


def read_orientation(img: Image.Image) -> int:
    """
    Return the EXIF orientation flag of an image.

    Parameters
    ----------
    img : PIL.Image
        Image as returned by ``load_image``

    Returns
    -------
    int
        Orientation in 1..8; 1 (upright) when the flag is absent or invalid
    """
    try:
        value = img.getexif().get(EXIF_ORIENTATION_TAG, 1)
    except Exception as e:  # malformed EXIF block
        logger.warning("Ignoring unreadable EXIF data: %s", e)
        return 1
    if value not in _ORIENTATION_OPS:
        logger.warning("Ignoring invalid EXIF orientation %r", value)
        return 1
    return value


def normalize_orientation(img: Image.Image, orientation: int = 1) -> Image.Image:
    """
    Rotate/flip an image according to an orientation flag.

    Parameters
    ----------
    img : PIL.Image
        Image whose pixels are stored in sensor order
    orientation : int, default=1
        EXIF orientation value (1-8)

    Returns
    -------
    PIL.Image
        Upright image. Orientation 1 returns the input unchanged.

    Raises
    ------
    ValueError
        If orientation is outside 1..8

    Examples
    --------
    >>> img = Image.new("RGB", (40, 30))
    >>> normalize_orientation(img, 6).size
    (30, 40)
    """
    if orientation not in _ORIENTATION_OPS:
        raise ValueError(f"Invalid orientation {orientation!r}, expected 1..8")
    op = _ORIENTATION_OPS[orientation]
    if op is None:
        return img
    return img.transpose(op)
