"""CLI entry point for the incident globe."""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from incidentglobe.actions import Advance, GoTo
from incidentglobe.config import Config, HeatmapConfig, load_config
from incidentglobe.export import heatmap_payload, view_payload, write_json
from incidentglobe.filters import Palette, apply
from incidentglobe.geo import lat_lon_to_uv
from incidentglobe.heatmap import build_heatmap, render_preview
from incidentglobe.models import ALL_ORGANIZATIONS, ALL_SECTIONS, ColorMode, Organization, SessionState
from incidentglobe.playback import PlaybackController
from incidentglobe.proximity import hover_summary
from incidentglobe.session import Session
from incidentglobe.store import RecordStore

logger = logging.getLogger(__name__)


def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--min-year", type=int, default=None, help="First year (default: earliest)")
    parser.add_argument("--max-year", type=int, default=None, help="Last year (default: latest)")
    parser.add_argument(
        "--org", action="append", default=None,
        choices=[o.value for o in Organization],
        help="Organization tag to include (repeatable; default: all)",
    )


def _filter_values(args: argparse.Namespace, store: RecordStore) -> tuple[int, int, frozenset[Organization]]:
    lo, hi = store.year_bounds or (0, 0)
    orgs = frozenset(Organization(o) for o in args.org) if args.org else frozenset(ALL_ORGANIZATIONS)
    return (
        lo if args.min_year is None else args.min_year,
        hi if args.max_year is None else args.max_year,
        orgs,
    )


def _load_store(args: argparse.Namespace, config: Config) -> RecordStore:
    path = Path(args.data) if args.data else config.resolved_data_path
    return RecordStore.from_csv(path, config)


async def _play(session: Session, interval: float) -> None:
    loop = asyncio.get_running_loop()
    finished = loop.create_future()

    def on_state(state: SessionState) -> None:
        print(f"  {state.playback.current_year}: {len(state.view)} incidents")
        if not state.playback.running and not finished.done():
            finished.set_result(None)

    session.subscribe(on_state)
    controller = PlaybackController(session, loop, interval)
    controller.start()
    if not controller.running:
        return
    try:
        await finished
    finally:
        controller.stop()


def main() -> None:
    parser = argparse.ArgumentParser(description="Humanitarian security incident globe")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--data", type=str, default=None, help="Incident CSV (overrides config)")
    sub = parser.add_subparsers(dest="command")

    # stats command
    sub.add_parser("stats", help="Show ingestion stats")

    # filter command
    filter_parser = sub.add_parser("filter", help="Build render buffers for a filter")
    _add_filter_args(filter_parser)
    filter_parser.add_argument(
        "--color-mode", default=ColorMode.SINGLE.value,
        choices=[m.value for m in ColorMode],
    )
    filter_parser.add_argument("-o", "--output", type=Path, default=None, help="Write buffers as JSON(.gz)")

    # heatmap command
    heatmap_parser = sub.add_parser("heatmap", help="Bin incidents into a heatmap grid")
    _add_filter_args(heatmap_parser)
    heatmap_parser.add_argument("--cell-size", type=float, default=None, help="Cell size in degrees")
    heatmap_parser.add_argument("-o", "--output", type=Path, default=None, help="Write cells as JSON(.gz)")
    heatmap_parser.add_argument("--png", type=Path, default=None, help="Write an equirectangular preview")

    # hover command
    hover_parser = sub.add_parser("hover", help="Summarize incidents near a point")
    _add_filter_args(hover_parser)
    point = hover_parser.add_mutually_exclusive_group(required=True)
    point.add_argument("--uv", type=float, nargs=2, metavar=("U", "V"))
    point.add_argument("--latlon", type=float, nargs=2, metavar=("LAT", "LON"))
    hover_parser.add_argument("--radius", type=float, default=None, help="UV radius")

    # chapters command
    sub.add_parser("chapters", help="Walk through the guided chapters")

    # play command
    play_parser = sub.add_parser("play", help="Play the year-by-year accumulation")
    play_parser.add_argument("--chapter", default=None, help="Chapter identifier (default: first with a timeline)")
    play_parser.add_argument("--interval", type=float, default=None, help="Seconds per year")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return

    config = load_config(args.config)
    store = _load_store(args, config)

    if args.command == "stats":
        print(store.ingestion)
        if store.year_bounds:
            print(f"Years: {store.year_bounds[0]}-{store.year_bounds[1]} ({len(store.years)} distinct)")
        for org in ALL_ORGANIZATIONS:
            n = sum(1 for r in store.records if r.involves(org))
            print(f"  {org.value}: {n} incidents")

    elif args.command == "filter":
        min_year, max_year, orgs = _filter_values(args, store)
        view = apply(
            store, min_year, max_year, orgs, ColorMode(args.color_mode),
            Palette.from_config(config.colors),
        )
        print(f"{len(view)} incidents for {min_year}-{max_year}")
        if args.output:
            write_json(view_payload(view), args.output)

    elif args.command == "heatmap":
        min_year, max_year, orgs = _filter_values(args, store)
        heat_config = config.heatmap
        if args.cell_size is not None:
            heat_config = HeatmapConfig(**{**heat_config.model_dump(), "cell_size_degrees": args.cell_size})
        heatmap = build_heatmap(store, min_year, max_year, orgs, heat_config)
        print(f"{len(heatmap)} cells for {min_year}-{max_year}")
        ranked = sorted(heatmap.cells, key=lambda c: c.aggregate_affected, reverse=True)
        for cell in ranked[:10]:
            print(
                f"  ({cell.center_lat:+.1f}, {cell.center_lon:+.1f}): "
                f"{cell.count} incidents, {cell.aggregate_affected:.0f} affected"
            )
        if args.output:
            write_json(heatmap_payload(heatmap), args.output)
        if args.png:
            render_preview(heatmap.cells, args.png, heat_config)

    elif args.command == "hover":
        min_year, max_year, orgs = _filter_values(args, store)
        view = apply(store, min_year, max_year, orgs, ColorMode.SINGLE, Palette.from_config(config.colors))
        uv = tuple(args.uv) if args.uv else tuple(lat_lon_to_uv(*args.latlon))
        hover_config = config.hover
        if args.radius is not None:
            hover_config = hover_config.model_copy(update={"radius": args.radius, "adaptive": False})
        summary = hover_summary(view, uv, ALL_SECTIONS, hover_config, config.tooltip)
        print(json.dumps(summary.model_dump(mode="json"), indent=2))

    elif args.command == "chapters":
        session = Session(store, config)
        while True:
            ui = session.ui_config()
            ch = ui["chapter"]
            print(
                f"[{ch['index'] + 1}/{ch['count']}] {ch['identifier']}: {ch['title']} "
                f"({ui['filter']['color_mode']}, layer={ui['layer']}, "
                f"{ui['incident_count']} incidents)"
            )
            if not ch["has_next"]:
                break
            session.dispatch(Advance())

    elif args.command == "play":
        session = Session(store, config)
        if args.chapter:
            ids = [c.identifier for c in session.chapters]
            if args.chapter not in ids:
                parser.error(f"unknown chapter {args.chapter!r}; choose from {', '.join(ids)}")
            session.dispatch(GoTo(ids.index(args.chapter)))
        else:
            for i, spec in enumerate(session.chapters):
                if spec.entry.timeline.visible:
                    session.dispatch(GoTo(i))
                    break
        interval = args.interval if args.interval is not None else config.playback.interval_seconds
        print(f"Playing chapter '{session.chapter.identifier}'")
        asyncio.run(_play(session, interval))

    else:
        parser.print_help()


if __name__ == "__main__":
    main()
