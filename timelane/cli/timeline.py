#!/usr/bin/env python3
"""
Timeline CLI.

Provides command-line tools for inspecting how an item set packs into
lanes and what a viewport would render.

Usage:
    python -m timelane.cli.timeline lanes --input items.json
    python -m timelane.cli.timeline view --input items.json \
        --zoom 2 --scroll-left 400 --width 1024 --height 768 --json
    python -m timelane.cli.timeline stats --input items.json
    python -m timelane.cli.timeline generate --count 10000 --seed 42 \
        --output large.json
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict

from timelane.app.constants import LANE_STRATEGIES
from timelane.cli.utils import load_items_file, validate_input_path, write_items_file
from timelane.core.lane_assigner import assign_lanes
from timelane.core.logging_config import setup_logging
from timelane.core.sample_data import generate_large_dataset
from timelane.core.timeline_config import load_config
from timelane.core.timeline_pipeline import build_layout, recompute
from timelane.core.timeline_stats import summarize_items
from timelane.core.viewport_culler import ViewModel, ViewportState

logger = logging.getLogger(__name__)


def view_model_to_dict(view_model: ViewModel) -> Dict[str, Any]:
    """Converts a view model to a JSON-serializable dictionary."""
    ranges = view_model.ranges
    return {
        "totalWidth": view_model.total_width,
        "totalHeight": view_model.total_height,
        "visibleLaneRange": list(ranges.lane_range),
        "visiblePixelRange": list(ranges.pixel_range),
        "visibleDateRange": [d.isoformat() for d in ranges.date_range],
        "visibleItems": [
            {
                **visible.laned_item.to_dict(),
                "x": visible.x,
                "width": visible.width,
                "y": visible.y,
                "height": visible.height,
            }
            for visible in view_model.visible_items
        ],
        "visibleMarkers": [
            {"date": m.date.isoformat(), "pixel": m.pixel, "label": m.label}
            for m in view_model.visible_markers
        ],
    }


def show_lanes(args: argparse.Namespace) -> int:
    """Print the lane assignment of an item file."""
    try:
        config = load_config(args.env_file)
        items = load_items_file(args.input)
        strategy = args.strategy or config.lane_strategy
        laned = assign_lanes(items, gap_days=config.lane_gap_days, strategy=strategy)

        if args.json:
            print(json.dumps([entry.to_dict() for entry in laned], indent=2))
            return 0

        lane_count = max((entry.lane for entry in laned), default=-1) + 1
        print(f"✓ {len(laned)} of {len(items)} items packed into {lane_count} lanes:")
        for entry in laned:
            print(
                f"  [lane {entry.lane}] {entry.id}: {entry.name} "
                f"({entry.start_date.isoformat()} - {entry.end_date.isoformat()})"
            )
        return 0

    except (OSError, ValueError) as e:
        logger.error(f"Failed to assign lanes: {e}")
        if args.verbose:
            raise
        return 1


def show_view(args: argparse.Namespace) -> int:
    """Print the culled view model of an item file."""
    try:
        config = load_config(args.env_file)
        items = load_items_file(args.input)
        viewport = ViewportState(
            scroll_top=max(0.0, args.scroll_top),
            scroll_left=max(0.0, args.scroll_left),
            container_width=args.width or config.default_container_width,
            container_height=args.height or config.default_container_height,
            zoom_level=config.clamp_zoom(
                args.zoom if args.zoom is not None else config.default_zoom
            ),
        )
        layout = build_layout(items, config)
        view_model = recompute(layout, viewport, config)

        if args.json:
            print(json.dumps(view_model_to_dict(view_model), indent=2))
            return 0

        ranges = view_model.ranges
        print(
            f"✓ Content {view_model.total_width:.0f}x{view_model.total_height:.0f}px "
            f"at zoom {viewport.zoom_level:g}"
        )
        print(f"  Lanes: {ranges.start_lane}-{ranges.end_lane}")
        print(
            f"  Dates: {ranges.start_date.isoformat()} - {ranges.end_date.isoformat()}"
        )
        print(f"  Markers: {', '.join(m.label for m in view_model.visible_markers)}")
        print(f"  Visible items ({len(view_model.visible_items)}):")
        for visible in view_model.visible_items:
            print(
                f"    [lane {visible.lane}] {visible.id}: {visible.laned_item.name} "
                f"x={visible.x:.1f} w={visible.width:.1f}"
            )
        return 0

    except (OSError, ValueError) as e:
        logger.error(f"Failed to compute view: {e}")
        if args.verbose:
            raise
        return 1


def show_stats(args: argparse.Namespace) -> int:
    """Print summary statistics of an item file."""
    try:
        config = load_config(args.env_file)
        items = load_items_file(args.input)
        stats = summarize_items(
            items, gap_days=config.lane_gap_days, strategy=config.lane_strategy
        )

        if args.json:
            print(json.dumps(stats.to_dict(), indent=2))
            return 0

        print("✓ Timeline statistics:")
        print(f"  Items: {stats.total_items}")
        print(f"  Valid: {stats.valid_items}")
        print(f"  Lanes: {stats.total_lanes}")
        span = "n/a" if stats.span_days is None else f"{stats.span_days} days"
        print(f"  Span: {span}")
        return 0

    except (OSError, ValueError) as e:
        logger.error(f"Failed to compute statistics: {e}")
        if args.verbose:
            raise
        return 1


def generate_items(args: argparse.Namespace) -> int:
    """Write a synthetic large dataset."""
    try:
        if args.count < 0:
            print("✗ Count must not be negative.")
            return 1

        items = generate_large_dataset(args.count, seed=args.seed)
        if args.output:
            write_items_file(args.output, items)
            print(f"✓ Generated {len(items)} items into {args.output}")
        else:
            print(json.dumps(items, indent=2))
        return 0

    except OSError as e:
        logger.error(f"Failed to write dataset: {e}")
        if args.verbose:
            raise
        return 1


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Inspect timeline lane packing and viewport culling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument(
        "--env-file", help="Path to a .env file with TIMELANE_* settings"
    )
    parser.add_argument(
        "--log-file", action="store_true", help="Also write logs/timelane.log"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Lanes command
    lanes_parser = subparsers.add_parser("lanes", help="Show lane assignment")
    lanes_parser.add_argument(
        "--input", "-i", required=True, help="Path to JSON items file"
    )
    lanes_parser.add_argument("--json", action="store_true", help="Output JSON")
    lanes_parser.add_argument(
        "--strategy",
        choices=LANE_STRATEGIES,
        help="Lane search strategy (default: from configuration)",
    )
    lanes_parser.set_defaults(func=show_lanes)

    # View command
    view_parser = subparsers.add_parser("view", help="Show the culled viewport")
    view_parser.add_argument(
        "--input", "-i", required=True, help="Path to JSON items file"
    )
    view_parser.add_argument("--zoom", type=float, help="Zoom level")
    view_parser.add_argument(
        "--scroll-top", type=float, default=0.0, help="Vertical scroll offset"
    )
    view_parser.add_argument(
        "--scroll-left", type=float, default=0.0, help="Horizontal scroll offset"
    )
    view_parser.add_argument("--width", type=float, help="Container width")
    view_parser.add_argument("--height", type=float, help="Container height")
    view_parser.add_argument("--json", action="store_true", help="Output JSON")
    view_parser.set_defaults(func=show_view)

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Show item statistics")
    stats_parser.add_argument(
        "--input", "-i", required=True, help="Path to JSON items file"
    )
    stats_parser.add_argument("--json", action="store_true", help="Output JSON")
    stats_parser.set_defaults(func=show_stats)

    # Generate command
    generate_parser = subparsers.add_parser(
        "generate", help="Generate a synthetic dataset"
    )
    generate_parser.add_argument(
        "--count", "-n", type=int, required=True, help="Number of items"
    )
    generate_parser.add_argument("--seed", type=int, help="Random seed")
    generate_parser.add_argument(
        "--output", "-o", help="Output file (default: print to stdout)"
    )
    generate_parser.set_defaults(func=generate_items)

    args = parser.parse_args()

    setup_logging(debug_mode=args.verbose, log_to_file=args.log_file)

    # Validate input path
    if getattr(args, "input", None) is not None:
        if not validate_input_path(args.input):
            sys.exit(1)

    # Execute command
    if hasattr(args, "func"):
        sys.exit(args.func(args))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
