"""Detect media category from URL extension and response headers.

Provides a small MediaCategory enum and `detect_category` helper.
"""

from __future__ import annotations

# Importa a classe Enum, que serve para criar uma lista de valores fixos, tipo um menu.
from enum import Enum
from pathlib import PurePosixPath

# Permite dizer que um parâmetro pode ser opcional (pode ser string ou pode ser “nada”).
from typing import Optional
from urllib.parse import urlparse

IMAGE_EXTENSIONS = {
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".svg",
    ".bmp",
    ".ico",
    ".avif",
    ".tiff",
}
VIDEO_EXTENSIONS = {".mp4", ".webm", ".ogg", ".ogv", ".mov", ".m4v", ".avi", ".mkv"}
FONT_EXTENSIONS = {".woff", ".woff2", ".ttf", ".otf", ".eot"}

MEDIA_EXTENSIONS = IMAGE_EXTENSIONS | VIDEO_EXTENSIONS | FONT_EXTENSIONS


# Isso cria a lista de categorias possíveis; cada uma vira uma subpasta.
class MediaCategory(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    FONT = "font"
    OTHER = "other"

    @property
    def dirname(self) -> str:
        """Name of the output subdirectory for this category."""
        if self is MediaCategory.OTHER:
            return "other"
        return f"{self.value}s"


def extension_of(url: str) -> str:
    """Lowercased extension of the URL path, query and fragment ignored."""
    path = urlparse(url).path
    return PurePosixPath(path).suffix.lower()


def _category_from_extension(ext: str) -> Optional[MediaCategory]:
    if ext in IMAGE_EXTENSIONS:
        return MediaCategory.IMAGE
    if ext in VIDEO_EXTENSIONS:
        return MediaCategory.VIDEO
    if ext in FONT_EXTENSIONS:
        return MediaCategory.FONT
    # Se não encontrou nenhuma extensão conhecida, devolve “nada”.
    return None


def _category_from_content_type(content_type: Optional[str]) -> Optional[MediaCategory]:
    if not content_type:
        return None
    c = content_type.lower().strip()
    if c.startswith("image/"):
        return MediaCategory.IMAGE
    if c.startswith("video/"):
        return MediaCategory.VIDEO
    if c.startswith("font/") or c.startswith(
        ("application/font-", "application/x-font-")
    ):
        return MediaCategory.FONT
    return None


def is_media_url(url: str) -> bool:
    return extension_of(url) in MEDIA_EXTENSIONS


def detect_category(url: str, content_type: Optional[str] = None) -> MediaCategory:
    """Detect media category by URL extension and optional Content-Type header.

    Heuristics: URL extension preferred, then content type prefix.
    Sem extensão conhecida e sem dica do servidor, o arquivo vai para "other".
    """
    category = _category_from_extension(extension_of(url))
    if category is not None:
        return category
    return _category_from_content_type(content_type) or MediaCategory.OTHER
