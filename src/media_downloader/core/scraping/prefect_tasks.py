"""Tarefas Prefect que usam os componentes de scraping.

Este arquivo adapta as funções "baixas" (fetcher, parser, downloader) para o
modelo de execução do Prefect. Prefect organiza trabalho em "tasks" e
"flows"; cada task aqui é uma unidade de trabalho com logs e estado.

Para quem não conhece Prefect:
- Um "task" é uma função executada por Prefect; ela tem logs/estado. Um
    "flow" compõe várias tasks em sequência.

Nenhuma task tem retries: um recurso que falha fica de fora desta execução.
As tasks que gravam em disco não usam cache, para sempre baixar de novo.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import requests
from prefect import get_run_logger, task
from prefect.cache_policies import NO_CACHE

from media_downloader.core.scraping.detector import MediaCategory
from media_downloader.core.scraping.downloader import DownloadSummary, MediaDownloader
from media_downloader.core.scraping.fetcher import Fetcher
from media_downloader.core.scraping.parser import (
    extract_media_from_css,
    extract_media_urls,
    extract_stylesheet_urls,
)


@task(name="fetch_html", retries=0, cache_policy=NO_CACHE)
def fetch_html_task(url: str, timeout: Optional[float] = 30.0) -> str:
    logger = get_run_logger()
    logger.info("Fetching %s...", url)
    with Fetcher(timeout=timeout) as f:
        html = f.get_text(url)
    logger.info("Fetched %s (%d chars)", url, len(html))
    return html


@task(name="extract_media", retries=0, cache_policy=NO_CACHE)
def extract_media_task(
    html: str, base_url: str, kinds: Optional[Iterable[MediaCategory]] = None
) -> List[str]:
    logger = get_run_logger()
    urls = extract_media_urls(html, base_url, kinds)
    logger.info("Extracted %d media URLs from %s", len(urls), base_url)
    return sorted(urls)


@task(name="extract_stylesheets", retries=0, cache_policy=NO_CACHE)
def extract_stylesheets_task(html: str, base_url: str) -> List[str]:
    logger = get_run_logger()
    urls = extract_stylesheet_urls(html, base_url)
    logger.info("Found %d stylesheets on %s", len(urls), base_url)
    return sorted(urls)


@task(name="scan_stylesheet", retries=0, cache_policy=NO_CACHE)
def scan_stylesheet_task(
    css_url: str,
    kinds: Optional[Iterable[MediaCategory]] = None,
    timeout: Optional[float] = 30.0,
) -> List[str]:
    """Fetch one stylesheet and return the media it references.

    A failed fetch is logged and yields an empty list, so one broken
    stylesheet never stops the others.
    """
    logger = get_run_logger()
    try:
        with Fetcher(timeout=timeout) as f:
            css_text = f.get_text(css_url)
    except requests.RequestException as exc:
        logger.warning("Failed to fetch stylesheet %s: %s", css_url, exc)
        return []
    urls = extract_media_from_css(css_text, css_url, kinds)
    logger.info("Extracted %d media URLs from stylesheet %s", len(urls), css_url)
    return sorted(urls)


@task(name="download_media", retries=0, cache_policy=NO_CACHE)
def download_media_task(
    urls: List[str],
    output_dir: str,
    probe_content_type: bool = True,
    timeout: Optional[float] = 30.0,
) -> DownloadSummary:
    logger = get_run_logger()
    # per-file errors are already logged by MediaDownloader
    with Fetcher(timeout=timeout) as f:
        d = MediaDownloader(f, probe_content_type=probe_content_type)
        summary = d.download_all(urls, output_dir)
    logger.info(
        "Downloaded %d of %d files to %s", summary.total, len(urls), output_dir
    )
    return summary
