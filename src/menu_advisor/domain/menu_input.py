"""Menu inputs accepted by classification: a fetched menu or a photo."""

import base64
from dataclasses import dataclass

from menu_advisor.domain.restaurants import MenuSnapshot


@dataclass(frozen=True)
class MenuText:
    """Menu fetched by a restaurant lookup."""

    menu: MenuSnapshot


@dataclass(frozen=True)
class MenuImage:
    """Photo of a physical menu."""

    data: bytes
    mime_type: str = "image/jpeg"

    @classmethod
    def from_bytes(cls, data: bytes) -> "MenuImage":
        """Build an image input, inferring the MIME type from its header."""
        return cls(data=data, mime_type=detect_mime_type(data))

    def to_data_url(self) -> str:
        """Return the image as a base64 data URL."""
        encoded = base64.b64encode(self.data).decode("utf-8")
        return f"data:{self.mime_type};base64,{encoded}"


MenuInput = MenuText | MenuImage


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
