"""Testes de ponta a ponta do flow de download de mídia.

O Fetcher usado pelas tasks é trocado por um falso (monkeypatch), então o
flow roda de verdade no Prefect (test harness) mas sem acessar a rede.
"""

import pytest
import requests

from media_downloader.flows.media_downloader import media_download_flow

PAGE_URL = "https://site.test/articles/post.html"


@pytest.fixture
def serve(monkeypatch, make_fetcher):
    """Route every Fetcher created by the tasks to one fake with `routes`."""

    def _serve(routes):
        fake = make_fetcher(routes)
        monkeypatch.setattr(
            "media_downloader.core.scraping.prefect_tasks.Fetcher",
            lambda timeout=None: fake,
        )
        return fake

    return _serve


def test_page_with_image_anchor_and_stylesheet(prefect_harness, serve, tmp_path, list_files):
    page = """
    <html><head><link rel="stylesheet" href="/static/site.css"></head>
    <body><img src="/a.png"><a href="b.mp4">clip</a></body></html>
    """
    serve(
        {
            PAGE_URL: (page, "text/html"),
            "https://site.test/static/site.css": (
                "body { background: url('c.woff2') }",
                "text/css",
            ),
            "https://site.test/a.png": (b"png", "image/png"),
            "https://site.test/articles/b.mp4": (b"mp4", "video/mp4"),
            "https://site.test/static/c.woff2": (b"woff2", "font/woff2"),
        }
    )

    result = media_download_flow({"target_url": PAGE_URL, "output_dir": str(tmp_path)})

    assert list_files(tmp_path) == ["fonts/c.woff2", "images/a.png", "videos/b.mp4"]
    assert result["found"] == 3
    assert result["downloaded"] == 3
    assert result["counts"] == {"images": 1, "videos": 1, "fonts": 1, "other": 0}
    assert result["failed"] == []


def test_page_without_media_creates_no_category_folders(prefect_harness, serve, tmp_path):
    serve({PAGE_URL: ("<html><body><p>just text</p></body></html>", "text/html")})

    result = media_download_flow({"target_url": PAGE_URL, "output_dir": str(tmp_path)})

    assert result["downloaded"] == 0
    assert result["counts"] == {"images": 0, "videos": 0, "fonts": 0, "other": 0}
    assert list(tmp_path.iterdir()) == []


def test_broken_stylesheet_does_not_stop_the_others(prefect_harness, serve, tmp_path, list_files):
    page = """
    <link rel="stylesheet" href="/broken.css">
    <link rel="stylesheet" href="/missing.css">
    <link rel="stylesheet" href="/ok.css">
    <img src="/logo.png">
    """
    serve(
        {
            PAGE_URL: (page, "text/html"),
            "https://site.test/broken.css": requests.ConnectionError("reset by peer"),
            "https://site.test/ok.css": ("h1 { background: url(/hero.jpg) }", "text/css"),
            "https://site.test/logo.png": (b"logo", "image/png"),
            "https://site.test/hero.jpg": (b"hero", "image/jpeg"),
        }
    )

    result = media_download_flow({"target_url": PAGE_URL, "output_dir": str(tmp_path)})

    assert list_files(tmp_path) == ["images/hero.jpg", "images/logo.png"]
    assert result["downloaded"] == 2


def test_failed_resource_is_reported_not_raised(prefect_harness, serve, tmp_path, list_files):
    page = '<img src="/ok.png"><img src="/gone.png"><video src="/v.webm"></video>'
    serve(
        {
            PAGE_URL: (page, "text/html"),
            "https://site.test/ok.png": (b"ok", "image/png"),
            "https://site.test/v.webm": requests.ReadTimeout("timed out"),
        }
    )

    result = media_download_flow({"target_url": PAGE_URL, "output_dir": str(tmp_path)})

    assert list_files(tmp_path) == ["images/ok.png"]
    assert result["failed"] == ["https://site.test/gone.png", "https://site.test/v.webm"]


def test_same_basename_from_two_urls_is_one_file(prefect_harness, serve, tmp_path, list_files):
    page = '<img src="/a/logo.png"><img src="https://cdn.site.test/b/logo.png">'
    serve(
        {
            PAGE_URL: (page, "text/html"),
            "https://site.test/a/logo.png": (b"logo-a", "image/png"),
            "https://cdn.site.test/b/logo.png": (b"logo-b", "image/png"),
        }
    )

    result = media_download_flow({"target_url": PAGE_URL, "output_dir": str(tmp_path)})

    assert result["found"] == 2
    assert list_files(tmp_path) == ["images/logo.png"]


def test_images_only_run(prefect_harness, serve, tmp_path, list_files):
    page = '<img src="/a.png"><video src="/b.mp4"></video><a href="/c.woff2">font</a>'
    serve(
        {
            PAGE_URL: (page, "text/html"),
            "https://site.test/a.png": (b"png", "image/png"),
            "https://site.test/b.mp4": (b"mp4", "video/mp4"),
            "https://site.test/c.woff2": (b"woff2", "font/woff2"),
        }
    )

    media_download_flow(
        {"target_url": PAGE_URL, "output_dir": str(tmp_path), "media_kinds": ["image"]}
    )

    assert list_files(tmp_path) == ["images/a.png"]


def test_unreachable_page_aborts_the_run(prefect_harness, serve, tmp_path):
    serve({PAGE_URL: requests.ConnectionError("no route to host")})

    with pytest.raises(requests.ConnectionError):
        media_download_flow({"target_url": PAGE_URL, "output_dir": str(tmp_path)})

    assert list(tmp_path.iterdir()) == []


def test_failed_download_is_logged_once(prefect_harness, serve, tmp_path, caplog):
    page = '<img src="/gone.png">'
    serve({PAGE_URL: (page, "text/html")})

    with caplog.at_level("ERROR"):
        result = media_download_flow({"target_url": PAGE_URL, "output_dir": str(tmp_path)})

    assert result["failed"] == ["https://site.test/gone.png"]
    lines = [
        r for r in caplog.records
        if "Error downloading https://site.test/gone.png" in r.getMessage()
    ]
    assert len(lines) == 1


def test_every_task_closes_its_fetcher(prefect_harness, serve, tmp_path):
    page = '<link rel="stylesheet" href="/s.css"><img src="/a.png">'
    fake = serve(
        {
            PAGE_URL: (page, "text/html"),
            "https://site.test/s.css": ("p { background: url(/b.png) }", "text/css"),
            "https://site.test/a.png": (b"a", "image/png"),
            "https://site.test/b.png": (b"b", "image/png"),
        }
    )

    media_download_flow({"target_url": PAGE_URL, "output_dir": str(tmp_path)})

    # page, stylesheet and download batch each open and close one fetcher
    assert fake.closed == 3
