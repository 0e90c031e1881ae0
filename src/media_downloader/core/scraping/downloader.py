"""
Downloader (explicação para leigos)

Este arquivo contém o componente responsável por baixar os arquivos de mídia
encontrados na página (imagens, vídeos, fontes...). A ideia principal é:

- descobrir a categoria do arquivo pela extensão da URL (ou, se não der,
    perguntando ao servidor com um pedido HEAD);
- salvar o arquivo em uma pasta por categoria
    (ex: `saida/images/logo.png`, `saida/fonts/inter.woff2`);
- baixar o arquivo em pedaços (stream), para não ocupar muita memória;
- baixar todos os arquivos ao mesmo tempo, sem que a falha de um atrapalhe
    os outros.

Comentários simples:
- "stream": significa ler o arquivo em blocos pequenos em vez de carregar tudo
    na memória, importante para vídeos grandes.
- Se duas URLs diferentes têm o mesmo nome de arquivo, a última gravação
    vence: só um arquivo fica no disco.
"""

from __future__ import annotations

# datetime: nome de arquivo de reserva quando a URL não tem nome
import datetime
import logging
from collections import Counter

# ThreadPoolExecutor: roda vários downloads em paralelo
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

# Path: trabalhar com caminhos de arquivos de forma limpa
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

import requests

from media_downloader.core.scraping.detector import MediaCategory, detect_category

# Importa o objeto que realmente faz o download via HTTP.
from media_downloader.core.scraping.fetcher import Fetcher

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@dataclass
class DownloadResult:
    """Outcome of one download: the saved path, or the error that stopped it."""

    url: str
    category: Optional[MediaCategory] = None
    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DownloadSummary:
    results: List[DownloadResult] = field(default_factory=list)

    @property
    def downloaded(self) -> List[DownloadResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[DownloadResult]:
        return [r for r in self.results if not r.ok]

    @property
    def total(self) -> int:
        return len(self.downloaded)

    @property
    def counts(self) -> Dict[str, int]:
        """Per-category tally of successful downloads, keyed by directory name."""
        tally = Counter(r.category.dirname for r in self.downloaded if r.category)
        return {c.dirname: tally.get(c.dirname, 0) for c in MediaCategory}


# Define um "objeto" responsável por baixar arquivos de mídia.
class MediaDownloader:
    """Baixa arquivos de mídia para `output_root/<categoria>/<nome>`.

    Para um leigo:
    - `MediaDownloader().download(url, pasta)` baixa um único arquivo.
    - `MediaDownloader().download_all(urls, pasta)` baixa todos ao mesmo tempo
      e devolve um resumo; um arquivo com erro não interrompe os demais.

    A classe recebe opcionalmente um `Fetcher` (que encapsula as requisições
    HTTP). Isso facilita testes: podemos injetar um `Fetcher` falso que devolve
    respostas controladas.
    """

    def __init__(self, fetcher: Fetcher | None = None, probe_content_type: bool = True):
        # se nenhum fetcher for passado, criamos um padrão
        self.fetcher = fetcher or Fetcher()
        self.probe_content_type = probe_content_type

    def _filename_from_url(self, url: str) -> str:
        """Último pedaço do caminho da URL, sem a query string.

        Exemplos:
        - https://exemplo/img/logo.png?v=3 -> retorna 'logo.png'
        - https://exemplo/ -> não tem nome claro, então retornamos um nome
          gerado com o timestamp.
        """
        name = PurePosixPath(urlparse(url).path).name
        return name or f"download-{int(datetime.datetime.utcnow().timestamp())}"

    def _probe_content_type(self, url: str) -> Optional[str]:
        try:
            resp = self.fetcher.head(url)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.debug("HEAD %s failed: %s", url, exc)
            return None
        return resp.headers.get("Content-Type")

    def categorize(self, url: str) -> MediaCategory:
        """Category by extension; ask the server only when the extension is unknown."""
        category = detect_category(url)
        if category is MediaCategory.OTHER and self.probe_content_type:
            category = detect_category(url, self._probe_content_type(url))
        return category

    def download(self, url: str, output_root: Path | str) -> DownloadResult:
        """Baixa `url` em modo 'stream' e salva em `output_root/<categoria>/`.

        Passo a passo:
        1. Descobre a categoria (extensão, depois HEAD se necessário).
        2. Cria a subpasta da categoria, se ainda não existir.
        3. Abre a conexão em modo stream e verifica o status HTTP.
        4. Grava os blocos no arquivo; só devolvemos o resultado depois que o
           arquivo foi fechado (todos os bytes gravados).

        Erros de rede e de disco sobem como exceção; `download_all` cuida deles.
        """
        category = self.categorize(url)
        out_dir = Path(output_root) / category.dirname
        out_dir.mkdir(parents=True, exist_ok=True)
        out_path = out_dir / self._filename_from_url(url)

        resp = self.fetcher.stream_get(url)
        with resp as r:
            r.raise_for_status()
            # escrevemos em binário para suportar qualquer tipo de arquivo
            with open(out_path, "wb") as fh:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)

        logger.info("Downloaded %s: %s", category.value, out_path.name)
        return DownloadResult(url=url, category=category, path=out_path)

    def _safe_download(self, url: str, output_root: Path) -> DownloadResult:
        try:
            return self.download(url, output_root)
        except (requests.RequestException, OSError) as exc:
            logger.error("Error downloading %s: %s", url, exc)
            return DownloadResult(url=url, error=str(exc))
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Unexpected error downloading %s", url)
            return DownloadResult(url=url, error=str(exc))

    def download_all(self, urls: Iterable[str], output_root: Path | str) -> DownloadSummary:
        """Baixa todas as URLs ao mesmo tempo e espera todas terminarem.

        Cada URL ganha sua própria thread (sem limite). A falha de uma não
        cancela as outras; o erro fica registrado no resumo.
        """
        url_list = sorted(set(urls))
        summary = DownloadSummary()
        if not url_list:
            return summary

        root = Path(output_root)
        with ThreadPoolExecutor(max_workers=len(url_list)) as pool:
            futures = [pool.submit(self._safe_download, u, root) for u in url_list]
            summary.results = [f.result() for f in futures]
        return summary
