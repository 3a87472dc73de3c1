"""
Puyo Recognition – Main Entry Point
===================================

Commands:

  1. **Recognize** – Read a screenshot, locate the board and print the
                     board / queue strings and the puyosim URL.
  2. **Render**    – Paint a synthetic screenshot from encoded strings
                     (and optionally write the matching anchor crops).

Usage examples
--------------

**Recognition**::

    python puyo_vision.py recognize \\
        --image screenshot.png \\
        --anchor anchors/menu.png \\
        --queue-anchor anchors/queue_bar.png

**Synthetic screenshot**::

    python puyo_vision.py render \\
        --board AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAABCDEFGRS \\
        --queue BCDEAAAA \\
        --scale 0.75 \\
        --output synthetic.png \\
        --anchor-dir anchors
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import cv2

from puyo_vision.config import DEFAULT_CONFIG, load_config
from puyo_vision.errors import PuyoVisionError
from puyo_vision.inference.encoding import format_board

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("puyo_vision")


# ═══════════════════════════════════════════════════════════════════════
# Recognition
# ═══════════════════════════════════════════════════════════════════════

def cmd_recognize(args: argparse.Namespace) -> None:
    """Run the recognition pipeline on a screenshot."""
    from puyo_vision.inference.pipeline import PuyoRecognitionPipeline
    from puyo_vision.inference.runtime import AnchorLibrary
    from puyo_vision.models.board_locator import PRIMARY_ANCHOR, SECONDARY_ANCHOR

    try:
        config = load_config(args.config) if args.config else DEFAULT_CONFIG
    except (OSError, ValueError) as exc:
        log.error("Invalid config %s: %s", args.config, exc)
        sys.exit(1)

    # Start anchor loading before decoding the screenshot
    library = AnchorLibrary()
    paths = {}
    if args.anchor:
        paths[PRIMARY_ANCHOR] = args.anchor
    if args.queue_anchor:
        paths[SECONDARY_ANCHOR] = args.queue_anchor
    library.load_async(paths, baseline_width=args.baseline_width)

    image = cv2.imread(args.image, cv2.IMREAD_COLOR)
    if image is None:
        log.error("Could not read image: %s", args.image)
        sys.exit(1)

    pipeline = PuyoRecognitionPipeline(
        config=config,
        library=library,
        ready_timeout=args.timeout,
    )

    try:
        result = pipeline.recognize(image)
    except (PuyoVisionError, FileNotFoundError) as exc:
        log.error("Recognition failed: %s", exc)
        sys.exit(1)

    if args.json:
        output = {
            "board": result.board,
            "queue": result.queue,
            "url": result.url,
            "method": result.detection_method,
            "anchors": {
                name: {
                    "location": list(a.location),
                    "confidence": round(a.confidence, 4),
                    "scale": round(a.scale, 4),
                    "found": a.found,
                }
                for name, a in result.anchors.items()
            },
        }
        print(json.dumps(output, indent=2))
        return

    print("\n" + "=" * 60)
    print("  PUYO RECOGNITION RESULT")
    print("=" * 60)
    print(f"  Queue     : {result.queue}")
    for i, row in enumerate(format_board(result.board)):
        label = "  Board     :" if i == 0 else "             "
        print(f"{label} {row}")
    print(f"  Detection : {result.detection_method}")
    print(f"  URL       : {result.url}")
    print("=" * 60 + "\n")


# ═══════════════════════════════════════════════════════════════════════
# Synthetic rendering
# ═══════════════════════════════════════════════════════════════════════

def cmd_render(args: argparse.Namespace) -> None:
    """Write a synthetic screenshot (and anchor crops)."""
    from puyo_vision.synthetic.screenshot import default_templates, render_screenshot

    try:
        image = render_screenshot(
            args.board,
            args.queue,
            scale=args.scale,
            jpeg_quality=args.jpeg_quality,
        )
    except ValueError as exc:
        log.error("Cannot render: %s", exc)
        sys.exit(1)

    cv2.imwrite(args.output, image)
    log.info("Saved %dx%d screenshot to %s", image.shape[1], image.shape[0], args.output)

    if args.anchor_dir:
        out_dir = Path(args.anchor_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        for template in default_templates():
            path = out_dir / f"{template.name}.png"
            cv2.imwrite(str(path), template.image)
            log.info("Saved anchor '%s' to %s", template.name, path)


# ═══════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="puyo_vision",
        description="Puyo Puyo Quest screenshot → puyosim URL.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands")

    # ── recognize ──
    p_rec = sub.add_parser("recognize", help="Recognize a screenshot")
    p_rec.add_argument("--image", required=True,
                       help="Path to the screenshot")
    p_rec.add_argument("--anchor", default=None,
                       help="Menu-button anchor crop (optional)")
    p_rec.add_argument("--queue-anchor", default=None,
                       help="Queue-bar anchor crop (optional)")
    p_rec.add_argument("--baseline-width", type=int, default=1080,
                       help="Width of the screenshot the anchors were cut from")
    p_rec.add_argument("--config", default=None,
                       help="JSON file with threshold overrides")
    p_rec.add_argument("--timeout", type=float, default=10.0,
                       help="Seconds to wait for anchor loading")
    p_rec.add_argument("--json", action="store_true",
                       help="Print machine-readable JSON")

    # ── render ──
    p_ren = sub.add_parser("render", help="Render a synthetic screenshot")
    p_ren.add_argument("--board", required=True,
                       help="48 encoded board cells")
    p_ren.add_argument("--queue", default="AAAAAAAA")
    p_ren.add_argument("--scale", type=float, default=1.0)
    p_ren.add_argument("--jpeg-quality", type=int, default=None)
    p_ren.add_argument("--output", default="synthetic.png")
    p_ren.add_argument("--anchor-dir", default=None,
                       help="Also write the anchor crops here")

    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    dispatch = {
        "recognize": cmd_recognize,
        "render": cmd_render,
    }

    dispatch[args.command](args)


if __name__ == "__main__":
    main()
