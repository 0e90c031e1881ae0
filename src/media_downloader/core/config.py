import re
from pathlib import Path
from typing import Optional, Set
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from media_downloader.core.scraping.detector import MediaCategory

# pasta padrão de saída, ao lado do próprio pacote
DOWNLOADS_ROOT = Path(__file__).resolve().parents[1] / "_downloads"

MAX_DIRNAME_CHARS = 80


def slugify_url(url: str) -> str:
    """Turn hostname + path into a single directory name.

    Ex: https://example.com/blog/post?id=1 -> 'example.com-blog-post'
    """
    p = urlparse(url)
    name = (p.hostname or "") + p.path
    name = re.sub(r"^https?://", "", name)
    name = name.replace("/", "-").replace("?", "_").replace(":", "_")
    name = re.sub(r'[\\*<>|"]', "", name)
    name = re.sub(r"\.+$", "", name)
    name = re.sub(r"--+", "-", name)
    name = re.sub(r"-$", "", name)
    return name[:MAX_DIRNAME_CHARS]


class DownloadConfig(BaseModel):
    """
    Contrato de Configuração do download de mídia.
    Define tudo que é necessário para baixar a mídia de uma página.
    """

    target_url: str
    # None -> DOWNLOADS_ROOT/<slug da URL>
    output_dir: Optional[str] = None

    # Categorias desejadas; por padrão todas (imagens, vídeos, fontes, outros)
    media_kinds: Set[MediaCategory] = Field(default_factory=lambda: set(MediaCategory))

    follow_stylesheets: bool = True
    probe_content_type: bool = True
    timeout: Optional[float] = Field(default=30.0, gt=0)

    @property
    def output_path(self) -> Path:
        """Diretório raiz onde as subpastas de categoria serão criadas."""
        if self.output_dir:
            return Path(self.output_dir).resolve()
        return DOWNLOADS_ROOT / slugify_url(self.target_url)

    @property
    def kinds_filter(self) -> Optional[Set[MediaCategory]]:
        """None when every category is wanted, so extraction skips filtering."""
        if self.media_kinds >= set(MediaCategory):
            return None
        return set(self.media_kinds)

    @field_validator("target_url")
    def target_url_must_be_http(cls, v):
        v = v.strip()
        p = urlparse(v)
        if p.scheme not in ("http", "https") or not p.netloc:
            raise ValueError("target_url deve ser uma URL http(s) completa")
        return v

    @field_validator("media_kinds")
    def media_kinds_not_empty(cls, v):
        if not v:
            raise ValueError("media_kinds não pode ser vazio")
        return v
