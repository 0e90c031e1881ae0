"""
Fluxo de download de mídia (explicado para leigos)

Este arquivo define um "flow" do Prefect que coordena as operações para
baixar toda a mídia (imagens, vídeos, fontes) de uma única página web.

Visão geral simplificada do que o fluxo faz:

1. Valida a configuração (URL alvo, pasta de saída, categorias desejadas).
2. Busca a página HTML. Se isso falhar, não há o que extrair e o fluxo para.
3. Extrai as URLs de mídia da página (img, video, embed/object, estilos
    inline, blocos <style> e links diretos para arquivos de mídia).
4. Para cada folha de estilo (<link rel="stylesheet">) baixa o CSS e procura
    `url(...)` dentro dele. Uma folha de estilo com erro é apenas ignorada.
5. Baixa todas as URLs encontradas ao mesmo tempo, cada uma na pasta da sua
    categoria, e devolve um resumo com a contagem por categoria.
"""

from __future__ import annotations

from typing import Any, Dict, Set

from prefect import flow, get_run_logger

from media_downloader.core.config import DownloadConfig
from media_downloader.core.scraping.prefect_tasks import (
    download_media_task,
    extract_media_task,
    extract_stylesheets_task,
    fetch_html_task,
    scan_stylesheet_task,
)


@flow(name="Media Downloader", log_prints=True)
def media_download_flow(config_dict: dict) -> Dict[str, Any]:
    """Download every media resource referenced by one page.

    config_dict: must conform to `DownloadConfig`.
    Returns a summary dict: output_dir, found, downloaded, counts, failed.
    """
    logger = get_run_logger()
    try:
        config = DownloadConfig(**config_dict)
        logger.info("Config valid for %s", config.target_url)
    except Exception as e:
        logger.error("Invalid config: %s", e)
        raise

    output_dir = config.output_path
    output_dir.mkdir(parents=True, exist_ok=True)
    kinds = config.kinds_filter

    # Sem a página não há nada a extrair: um erro aqui encerra o fluxo.
    try:
        html = fetch_html_task(config.target_url, timeout=config.timeout)
    except Exception as exc:
        logger.error("Error fetching %s: %s", config.target_url, exc)
        raise

    urls: Set[str] = set(extract_media_task(html, config.target_url, kinds))

    if config.follow_stylesheets:
        stylesheets = extract_stylesheets_task(html, config.target_url)
        for css_url in stylesheets:
            urls.update(scan_stylesheet_task(css_url, kinds, timeout=config.timeout))

    logger.info("Found %d media files to download.", len(urls))

    summary = download_media_task(
        sorted(urls),
        str(output_dir),
        probe_content_type=config.probe_content_type,
        timeout=config.timeout,
    )

    result = {
        "output_dir": str(output_dir),
        "found": len(urls),
        "downloaded": summary.total,
        "counts": summary.counts,
        "failed": sorted(r.url for r in summary.failed),
    }
    logger.info(
        "All media downloaded to %s (%s)",
        output_dir,
        ", ".join(f"{k}: {v}" for k, v in result["counts"].items()),
    )
    return result


if __name__ == "__main__":
    payload = {
        "target_url": "https://example.com",
        "output_dir": "./my-media",
    }
    media_download_flow(payload)
