#!/usr/bin/env python3
"""
passportkit command line

Turn a portrait into a print-ready sheet of passport photos:
- Crops around the detected face to the passport aspect ratio (600 px wide)
- Replaces the background with a solid colour (rembg segmentation)
- Tiles as many copies as requested (and as fit) onto a paper sheet

Usage:
  passportkit --input in.jpg --output sheet.png
  passportkit -i in.jpg -o sheet.jpg --photo-format us-passport --paper 4r --copies 6
  passportkit -i in.jpg -o preview.png --background "#ADD8E6" --preview
  passportkit -i in.jpg -o sheet.png --no-bg --no-crop
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional

from passportkit.app.state import AppState
from passportkit.core.catalog import PAPER_LAYOUTS, PHOTO_FORMATS, get_paper_layout
from passportkit.core.errors import PassportKitError
from passportkit.core.imaging import save_image
from passportkit.core.models import ProcessingParams

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    defaults = ProcessingParams()
    p = argparse.ArgumentParser(description="Generate a print sheet of passport photos from a portrait.")
    p.add_argument("--input", "-i", required=True, help="Path to input image (jpg/png/webp)")
    p.add_argument("--output", "-o", required=True, help="Path to output sheet (png/jpg)")
    p.add_argument(
        "--photo-format", default=defaults.photo_format, choices=sorted(PHOTO_FORMATS),
        help=f"Photo size (default: {defaults.photo_format})",
    )
    p.add_argument(
        "--paper", default=defaults.paper, choices=sorted(PAPER_LAYOUTS),
        help=f"Paper size (default: {defaults.paper})",
    )
    p.add_argument("--copies", type=int, default=defaults.copies, help=f"Number of copies (default: {defaults.copies})")
    p.add_argument(
        "--background", default=defaults.background,
        help="Background colour: #RRGGBB or a preset name like 'lightblue' (default: white)",
    )
    p.add_argument("--no-bg", action="store_true", help="Keep the original background")
    p.add_argument("--no-crop", action="store_true", help="Skip the face-centred passport crop")
    p.add_argument("--preview", action="store_true", help="Render at screen resolution (96 DPI) instead of 300 DPI")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return p


def run(args: argparse.Namespace) -> str:
    paper = get_paper_layout(args.paper)

    state = AppState()
    state.params = replace(
        state.params,
        photo_format=args.photo_format,
        paper=args.paper,
        copies=args.copies,
        background=args.background,
        remove_background=not args.no_bg,
        auto_crop=not args.no_crop,
    )

    state.load(args.input)
    if state.params.auto_crop:
        state.auto_crop()
    if state.params.remove_background:
        state.remove_background()

    sheet = state.preview_sheet() if args.preview else state.export_sheet()
    out = save_image(sheet, args.output)
    logger.info("Sheet for %s written to %s", paper.name, out)
    return str(out)


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        saved = run(args)
    except (PassportKitError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    print(f"Saved: {saved}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
