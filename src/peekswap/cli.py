"""Command line front end for composing reveal images."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from peekswap import __version__
from peekswap.config import ComposeConfig
from peekswap.controller import ComposeError, compose_files
from peekswap.ingest import DecodeError, UnsupportedCanvasError, ValidationError, read_upload
from peekswap.layout import (
    LayoutConfig,
    center_window,
    cover_visibility,
    project_for_width,
)
from peekswap.layout.config import REVEAL_RATIO_DEFAULT, REVEAL_RATIO_MAX, REVEAL_RATIO_MIN
from peekswap.output import WatermarkConfig, default_watermark_candidates
from peekswap.output.compositor import DEFAULT_JPEG_QUALITY
from peekswap.state import ImageState

logger = logging.getLogger("peekswap")

EXIT_OK = 0
EXIT_USER_ERROR = 1
EXIT_COMPOSE_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="peekswap",
        description="Combine a cover photo and a hidden photo into one tall reveal image.",
    )
    parser.add_argument("cover", type=Path, help="Photo shown in the chat preview")
    parser.add_argument("hidden", type=Path, nargs="?", help="Photo revealed when the full image is opened")
    parser.add_argument("--output", "-o", type=Path, default=Path("."),
                        help="Output file or directory (default: current directory)")
    parser.add_argument("--ratio", "-r", type=float, default=REVEAL_RATIO_DEFAULT,
                        help=f"Reveal ratio, clamped to [{REVEAL_RATIO_MIN}, {REVEAL_RATIO_MAX}] (default: %(default)s)")
    parser.add_argument("--width", "-w", type=int, default=None,
                        help="Fixed canvas width instead of 1080/1242/1440 fallback")
    parser.add_argument("--trim", action="store_true", help="Trim white borders before layout")
    parser.add_argument("--normalize", action="store_true", help="Center-crop both photos to 9:16")
    parser.add_argument("--watermark", type=Path, action="append", default=None,
                        help="Watermark logo path (repeatable; first readable wins)")
    parser.add_argument("--default-watermark", action="store_true",
                        help="Look up the watermark in $PEEKSWAP_WATERMARK, ~/.peekswap, ./")
    parser.add_argument("--caption", action="append", default=None,
                        help="Watermark caption line (repeat for the second line)")
    parser.add_argument("--quality", "-q", type=int, default=DEFAULT_JPEG_QUALITY, help="JPEG quality (default: %(default)s)")
    parser.add_argument("--layout-only", action="store_true",
                        help="Print the resolved layout as JSON without rendering")
    parser.add_argument("--preview-width", type=float, default=None,
                        help="With --layout-only, also print the layout projected to this width")
    parser.add_argument("--window", type=float, default=None,
                        help="With --layout-only, report cover visibility in a centered window of this height")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _config_from_args(args: argparse.Namespace) -> ComposeConfig:
    candidates: List[Path] = list(args.watermark or [])
    if args.default_watermark:
        candidates.extend(default_watermark_candidates())
    watermark = WatermarkConfig(captions=tuple(args.caption)) if args.caption else WatermarkConfig()
    return ComposeConfig(
        reveal_ratio=args.ratio,
        target_width=args.width,
        trim_whitespace=args.trim,
        normalize_aspect=args.normalize,
        jpeg_quality=args.quality,
        watermark_candidates=tuple(candidates),
        layout=LayoutConfig(),
        watermark=watermark,
    )


def _print_layout(args: argparse.Namespace, config: ComposeConfig) -> int:
    with ImageState(config) as state:
        try:
            state.upload("cover", read_upload(args.cover))
            if args.hidden is not None:
                state.upload("hidden", read_upload(args.hidden))
        except (ValidationError, DecodeError, UnsupportedCanvasError) as e:
            logger.error(str(e))
            return EXIT_USER_ERROR
        layout = state.layout()

    report = {"layout": layout.to_dict() if layout else None}
    if layout is not None and args.preview_width:
        report["preview"] = project_for_width(layout, args.preview_width).to_dict()
    if layout is not None and args.window:
        top, bottom = center_window(layout, args.window)
        report["window"] = {
            "top": top,
            "bottom": bottom,
            "cover_visibility": cover_visibility(layout, args.window),
        }
    print(json.dumps(report, indent=2))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    if args.layout_only:
        return _print_layout(args, config)

    try:
        result = compose_files(args.cover, args.hidden, args.output, config)
    except ComposeError as e:
        logger.error(str(e))
        return EXIT_USER_ERROR if e.user_error else EXIT_COMPOSE_ERROR

    print(result.output_path)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
