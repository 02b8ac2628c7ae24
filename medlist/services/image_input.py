# medlist/services/image_input.py
import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional

from medlist.services.errors import InvalidInputError

DEFAULT_MEDIA_TYPE = "image/png"

_DATA_URL_RE = re.compile(r"^data:(.+);base64,(.*)$", re.DOTALL)


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    media_type: str

    @property
    def b64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.b64}"

    @property
    def size(self) -> int:
        return len(self.data)


def _decode_b64(text: str) -> bytes:
    # pasted text often carries line breaks
    cleaned = "".join(text.split())
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError(f"Image data is not valid base64: {e}") from e


def normalize_upload(data: bytes, content_type: Optional[str]) -> ImagePayload:
    """Binary upload: bytes and declared MIME type are used as-is."""
    if not data:
        raise InvalidInputError("No image provided")
    return ImagePayload(data=data, media_type=(content_type or "").strip() or DEFAULT_MEDIA_TYPE)


def normalize_image_data(image_data: Optional[str]) -> ImagePayload:
    """
    Pasted image text, either a data URL (data:<type>;base64,<payload>)
    or bare base64 which is assumed to be PNG.
    """
    text = (image_data or "").strip()
    if not text:
        raise InvalidInputError("No image provided")

    m = _DATA_URL_RE.match(text)
    if m:
        media_type, payload = m.group(1).strip(), m.group(2)
    else:
        media_type, payload = DEFAULT_MEDIA_TYPE, text

    data = _decode_b64(payload)
    if not data:
        raise InvalidInputError("No image provided")
    return ImagePayload(data=data, media_type=media_type)


def normalize(
    upload: Optional[bytes] = None,
    content_type: Optional[str] = None,
    image_data: Optional[str] = None,
) -> ImagePayload:
    """Upload wins over imageData; neither present -> InvalidInputError."""
    if upload:
        return normalize_upload(upload, content_type)
    if image_data:
        return normalize_image_data(image_data)
    raise InvalidInputError("No image provided")
