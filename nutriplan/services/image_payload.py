"""
Data-URL decoding for meal photos.
"""
import re
from typing import Any

from nutriplan.core.errors import InvalidImageDataError
from nutriplan.models.diet import DietModel


_MIME_TYPE = re.compile(r":(.*?);")


class InlineImage(DietModel):
    """Base64 image submitted inline next to an instruction."""

    mimeType: str
    data: str


class MultimodalPrompt(DietModel):
    """Instruction text plus one inline image."""

    text: str
    image: InlineImage


def decode_data_url(image_data_url: Any) -> InlineImage:
    """
    Split a data:<mime>;base64,<data> URL into MIME type and payload.

    Args:
        image_data_url: Data URL as sent by the client

    Returns:
        InlineImage with mimeType and data

    Raises:
        InvalidImageDataError: If the URL is missing, has no comma separated
            payload, or carries no MIME type
    """
    if not image_data_url or not isinstance(image_data_url, str):
        raise InvalidImageDataError("Invalid image data: imageDataUrl is missing or not a string.")

    header, _, data = image_data_url.partition(",")
    if not header or not data:
        raise InvalidImageDataError("Invalid image data: base64 data is missing.")

    match = _MIME_TYPE.search(header)
    if not match or not match.group(1):
        raise InvalidImageDataError("Invalid image data: MIME type is missing.")

    return InlineImage(mimeType=match.group(1), data=data)
