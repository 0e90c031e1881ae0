"""Command-line entry point for the media downloader."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from pydantic import ValidationError

from media_downloader.core.scraping.detector import MediaCategory
from media_downloader.flows.media_downloader import media_download_flow

logger = logging.getLogger("media_downloader.cli")

USAGE = "Usage: media-downloader <url> [--output|-o <directory>]"
EXAMPLE = "Example: media-downloader https://example.com --output ./my-media"


def _parse_kinds(value: str) -> List[str]:
    kinds = [v.strip().lower() for v in value.split(",") if v.strip()]
    valid = {c.value for c in MediaCategory}
    unknown = [k for k in kinds if k not in valid]
    if unknown or not kinds:
        raise argparse.ArgumentTypeError(
            f"invalid media kind(s): {', '.join(unknown) or value!r} "
            f"(choose from {', '.join(sorted(valid))})"
        )
    return kinds


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="media-downloader",
        description="Download images, videos and fonts referenced by a web page.",
    )
    parser.add_argument("url", nargs="?", help="Page to scan for media")
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Directory where files should be written (default: _downloads/<url slug>)",
    )
    parser.add_argument(
        "--only",
        type=_parse_kinds,
        default=None,
        help="Comma-separated categories to keep: image,video,font,other",
    )
    parser.add_argument(
        "--no-stylesheets",
        action="store_true",
        help="Do not fetch linked stylesheets to look for url(...) references",
    )
    parser.add_argument(
        "--no-probe",
        action="store_true",
        help="Do not send HEAD requests to categorize files without a known extension",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    if not args.url:
        print(USAGE)
        print(EXAMPLE)
        return 1

    configure_logging(args.verbose)

    payload = {
        "target_url": args.url,
        "output_dir": args.output,
        "follow_stylesheets": not args.no_stylesheets,
        "probe_content_type": not args.no_probe,
        "timeout": args.timeout,
    }
    if args.only:
        payload["media_kinds"] = args.only

    try:
        result = media_download_flow(payload)
    except ValidationError as exc:
        print(f"Invalid arguments: {exc}")
        return 1
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Error: {exc}")
        return 0

    print(f"Found {result['found']} media files.")
    for dirname, count in result["counts"].items():
        print(f"  {dirname}: {count}")
    if result["failed"]:
        print(f"  failed: {len(result['failed'])}")
    print(f"All media downloaded to {result['output_dir']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
