"""Core scraping primitives exported for reuse across flows and the CLI.

This package contains small, well-tested building blocks: Fetcher, Detector,
Parser, Normalizer and MediaDownloader, plus Prefect task wrappers.
"""

from .detector import MediaCategory, detect_category
from .downloader import DownloadResult, DownloadSummary, MediaDownloader
from .fetcher import Fetcher
from .normalizer import normalize_url
from .parser import (
    extract_css_urls,
    extract_media_from_css,
    extract_media_urls,
    extract_stylesheet_urls,
)
from .prefect_tasks import (
    download_media_task,
    extract_media_task,
    extract_stylesheets_task,
    fetch_html_task,
    scan_stylesheet_task,
)

__all__ = [
    "Fetcher",
    "detect_category",
    "MediaCategory",
    "extract_css_urls",
    "extract_media_urls",
    "extract_stylesheet_urls",
    "extract_media_from_css",
    "normalize_url",
    "MediaDownloader",
    "DownloadResult",
    "DownloadSummary",
    "fetch_html_task",
    "extract_media_task",
    "extract_stylesheets_task",
    "scan_stylesheet_task",
    "download_media_task",
]
