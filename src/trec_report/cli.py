"""Command-line entry point.

Usage:
    trec-report --json inspection.json --out output_pdf.pdf \
        --template storage/TREC_Template_Blank.pdf --media-cache storage/images
"""

from __future__ import annotations

import argparse
import logging
import sys

from .config import IMAGE_SEARCH_DIRS, MEDIA_DIR, TEMPLATE_PDF
from .media import ImageResolver, MediaCache
from .record import load_record
from .renderer import render_report
from .results import RenderError

LOGGER = logging.getLogger("trec_report")


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Render an inspection JSON onto the TREC template.")
    ap.add_argument("--json", default="inspection.json", help="Path to inspection.json")
    ap.add_argument("--out", default="output_pdf.pdf", help="Output PDF path")
    ap.add_argument("--template", default=TEMPLATE_PDF, help="Blank TREC template PDF")
    ap.add_argument("--media-cache", default=MEDIA_DIR, help="Directory to cache downloaded images")
    ap.add_argument("--image-dir", action="append", default=None,
                    help="Extra directory to search for local photos (repeatable)")
    ap.add_argument("--no-download", action="store_true", help="Do not fetch remote photos")
    ap.add_argument("--no-probe", action="store_true",
                    help="Skip reading image dimensions; fit photos to a box instead")
    ap.add_argument("--debug", action="store_true",
                    help="Draw a coordinate grid on page 1 for tuning header positions")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        record = load_record(args.json)
    except (OSError, ValueError) as exc:
        LOGGER.error("Could not read %s: %s", args.json, exc)
        return 2

    if not args.no_download:
        record = MediaCache(args.media_cache).localize(record)

    search_dirs = list(args.image_dir or []) + list(IMAGE_SEARCH_DIRS)
    resolver = ImageResolver(search_dirs, cache_dir=args.media_cache)
    try:
        report = render_report(record, args.out, template_path=args.template,
                               resolver=resolver, probe=not args.no_probe,
                               debug=args.debug)
    except RenderError as exc:
        LOGGER.error("PDF generation failed: %s", exc)
        return 1

    for element, result in report.skipped:
        LOGGER.debug("skipped %s: %s", element, result.reason)
    print(f"Final PDF created: {report.output_path} ({report.summary()})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
