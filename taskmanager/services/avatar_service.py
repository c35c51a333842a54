"""Avatar upload checks and image normalization."""
from io import BytesIO
import re

from PIL import Image, UnidentifiedImageError

from taskmanager.errors import UploadRejected

MAX_AVATAR_BYTES = 1048576
AVATAR_SIZE = (250, 250)
# Larger pictures are refused before their pixels are decoded
MAX_AVATAR_PIXELS = 25_000_000
ALLOWED_FILENAME = re.compile(r"\.(jpg|jpeg|png)$", re.IGNORECASE)

NOT_A_PICTURE = "Please upload a Picture"
TOO_LARGE = "File too large"


def check_upload(filename: str, size: int) -> None:
    """
    Reject an upload before any decoding happens.

    Raises:
        UploadRejected: On a filename outside jpg/jpeg/png or more than 1 MiB
    """
    if not filename or not ALLOWED_FILENAME.search(filename):
        raise UploadRejected(NOT_A_PICTURE)
    if size > MAX_AVATAR_BYTES:
        raise UploadRejected(TOO_LARGE)


def normalize_avatar(data: bytes) -> bytes:
    """Resize any accepted image to a 250x250 PNG. CPU bound, run it off the event loop."""
    try:
        with Image.open(BytesIO(data)) as image:
            if image.width * image.height > MAX_AVATAR_PIXELS:
                raise UploadRejected(NOT_A_PICTURE)
            image.load()
            if image.mode not in ("RGB", "RGBA", "L", "LA"):
                has_alpha = "A" in image.mode or "transparency" in image.info
                image = image.convert("RGBA" if has_alpha else "RGB")
            resized = image.resize(AVATAR_SIZE)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise UploadRejected(NOT_A_PICTURE) from e

    output = BytesIO()
    resized.save(output, format="PNG")
    return output.getvalue()
