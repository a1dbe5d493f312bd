# storefront/media.py
import io
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError  # pip install pillow

from .errors import ValidationError

MAX_SIDE = 1200
JPEG_QUALITY = 90


def prepare_image(data: bytes, filename: str = "upload.jpg", field: str = "image") -> Tuple[str, bytes, str]:
    """
    Normalise an uploaded photo before it goes to the backend: honour the
    EXIF orientation, shrink to at most 1200px on the long side and
    re-encode as RGB JPEG. Returns the (filename, bytes, mime) tuple that
    multipart uploads expect.
    """
    try:
        img = Image.open(io.BytesIO(data))
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError({field: f"Not a readable image: {e}"}) from e

    img.thumbnail((MAX_SIDE, MAX_SIDE))
    img = img.convert("RGB")
    out = io.BytesIO()
    img.save(out, format="JPEG", quality=JPEG_QUALITY)
    name = (Path(filename).stem or "upload") + ".jpg"
    return name, out.getvalue(), "image/jpeg"
