"""Binary payloads delivered by file-picker and clipboard surfaces."""

from dataclasses import dataclass
from pathlib import Path
import mimetypes


@dataclass(frozen=True)
class ImageFile:
    """A named binary image with its MIME type."""

    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """File extension without the dot, taken from the name."""
        return self.name.rsplit(".", 1)[-1]

    @classmethod
    def from_path(cls, path: Path) -> "ImageFile":
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(name=path.name, content_type=content_type, data=path.read_bytes())


@dataclass(frozen=True)
class ClipboardItem:
    """One item of pasted clipboard data."""

    mime_type: str
    data: bytes

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")
