"""
Command Line Interface
======================

Usage:
    python -m voronoi_grid run                              # demo catalog, 300 ticks
    python -m voronoi_grid run --query nature --ticks 600 --output frame.json
    python -m voronoi_grid run --catalog items.json --config layout.json \\
        --query city --query-at 100 --output out/frame.json
    python -m voronoi_grid plot --input out/frame.json      # -> out/frame.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time as time_module
from typing import List, Optional

from tqdm import tqdm

from .catalog import DEMO_ITEMS, load_catalog
from .config import LayoutParams, load_config
from .errors import LayoutError
from .frames import save_frame
from .logging_config import setup_logging
from .orchestrator import FrameOrchestrator
from .physics import max_overlap
from .scheduler import ManualTickScheduler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="voronoi-grid",
        description="Relevance-weighted Voronoi layout simulation")
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--log-file', type=str, default=None)
    sub = parser.add_subparsers(dest='command', required=True)

    run = sub.add_parser('run', help='Simulate a number of ticks offline')
    run.add_argument('--catalog', '-c', type=str, default=None,
                     help='JSON list of items (default: bundled demo items)')
    run.add_argument('--config', type=str, default=None, help='Layout config JSON')
    run.add_argument('--query', '-q', type=str, default='')
    run.add_argument('--query-at', type=int, default=0,
                     help='Tick at which the query is applied (default: from start)')
    run.add_argument('--ticks', '-n', type=int, default=300)
    run.add_argument('--seed', type=int, default=None)
    run.add_argument('--output', '-o', type=str, default=None,
                     help='Write the final frame as JSON')
    run.add_argument('--no-progress', action='store_true')

    plot = sub.add_parser('plot', help='Render a saved frame to PNG')
    plot.add_argument('--input', '-i', type=str, required=True)
    plot.add_argument('--output', '-o', type=str, default=None)
    plot.add_argument('--dpi', type=int, default=150)
    return parser


def cmd_run(args) -> int:
    params = load_config(args.config) if args.config else LayoutParams()
    if args.seed is not None:
        params = LayoutParams(**{**params.to_dict(), 'seed': args.seed}).validate()
    items = load_catalog(args.catalog) if args.catalog else list(DEMO_ITEMS)

    print("=" * 60)
    print("Voronoi Relevance Grid")
    print("=" * 60)
    print(f"  Items: {len(items)}")
    print(f"  Bounds: {params.width:.0f} x {params.height:.0f}")
    print(f"  Query: {args.query!r} from tick {args.query_at}")

    scheduler = ManualTickScheduler()
    orch = FrameOrchestrator(params, scheduler=scheduler)
    if args.query_at <= 0:
        orch.set_query(args.query)
    orch.start(items)

    start_wall = time_module.time()
    for t in tqdm(range(args.ticks), desc="Simulating", unit="tick",
                  disable=args.no_progress):
        if t == args.query_at and args.query_at > 0:
            orch.set_query(args.query)
        if scheduler.advance() == 0:
            break
    orch.stop()
    elapsed = time_module.time() - start_wall

    frame = orch.latest_frame
    state = orch.state()
    print(f"\nSimulation complete!")
    print(f"  Ticks: {orch.tick_count} in {elapsed:.2f}s")
    if frame is not None:
        area = sum(cell.area for cell in frame.cells)
        print(f"  Cells: {len(frame.cells)} / {len(items)}, "
              f"area {area:.1f} of {params.width * params.height:.1f}")
        ranked = sorted(frame.cells, key=lambda c: c.relevance, reverse=True)
        for cell in ranked[:5]:
            print(f"    {cell.item.title:<24s} relevance={cell.relevance:.2f} "
                  f"area={cell.area:9.1f}")
    if state is not None:
        print(f"  Max overlap: {max_overlap(state, params):.2f}")

    if args.output and frame is not None:
        path = save_frame(frame, args.output, params)
        print(f"  Output: {path}")
    return 0


def cmd_plot(args) -> int:
    from .postprocess import render_frame_file
    path = render_frame_file(args.input, args.output, dpi=args.dpi)
    print(f"Saved {path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)
    try:
        if args.command == 'run':
            return cmd_run(args)
        return cmd_plot(args)
    except (LayoutError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
