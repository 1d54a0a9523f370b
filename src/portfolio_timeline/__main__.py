from __future__ import annotations

import argparse
import datetime as dt
import logging
import sys
from pathlib import Path

from rich.console import Console

from .config import ConfigError, TimelineConfig, load_config
from .parse_portfolio import PortfolioValidationError, load_portfolio
from .portfolio_models import Portfolio
from .timeline_session import TimelineSession

logger = logging.getLogger("portfolio_timeline")


def _parse_date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number '{value}'") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {parsed}")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("snapshot", help="Path to portfolio snapshot YAML")
    common.add_argument("--config", help="Path to timeline config YAML")
    common.add_argument("--today", type=_parse_date, help="Override today's date (YYYY-MM-DD)")
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    parser = argparse.ArgumentParser(
        prog="portfolio-timeline",
        description="Terminal timeline of a project portfolio",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "tui",
        parents=[common],
        help="Open the interactive dashboard",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    render = subparsers.add_parser(
        "render",
        parents=[common],
        help="Print a single timeline frame",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    render.add_argument("--width", type=_positive_int, default=80, help="Frame width in columns")
    render.add_argument("--height", type=_positive_int, default=12, help="Frame height in rows, axis included")
    render.add_argument("--zoom", type=_positive_int, default=1, help="Days per column")
    render.add_argument("--at", type=_parse_date, help="Date shown in column 0; defaults to centring on today")
    render.add_argument("--select", type=_positive_int, help="1-based project to highlight")

    export = subparsers.add_parser(
        "export",
        parents=[common],
        help="Write the lane layout as an SVG chart",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    export.add_argument("--out", default="output/timeline.svg", help="Output SVG path")
    export.add_argument("--title", default="", help="Chart title")
    return parser


def _configure_logging(verbose: bool, interactive: bool) -> None:
    if interactive:
        # Records go to the dashboard's log panel instead of stderr.
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _today_provider(override: dt.date | None):
    if override is not None:
        return lambda: override
    return dt.date.today


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, interactive=args.command == "tui")

    try:
        config: TimelineConfig = load_config(args.config)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: config file not found: {args.config}", file=sys.stderr)
        return 1

    snapshot_path = Path(args.snapshot)
    try:
        portfolio: Portfolio = load_portfolio(str(snapshot_path))
    except PortfolioValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: snapshot file not found: {snapshot_path}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading snapshot: {exc}", file=sys.stderr)
        return 1

    today = _today_provider(args.today)

    if args.command == "render":
        return _render(args, portfolio, config, today)
    if args.command == "export":
        return _export(args, portfolio, today)
    return _run_tui(args, portfolio, config, today)


def _render(args: argparse.Namespace, portfolio: Portfolio, config: TimelineConfig, today) -> int:
    session = TimelineSession(today=today, config=config, zoom=args.zoom)
    session.resize(args.width)
    session.replace_intervals(portfolio.intervals())
    if args.at is not None:
        session.viewport.scroll_to(args.at)
    if args.select is not None:
        session.viewport.select(args.select - 1, len(session.intervals))

    grid, frame = session.draw(args.width, args.height)
    console = Console(width=args.width, highlight=False)
    console.print(grid.to_text())
    console.print(session.status_line().to_text())
    if frame.hidden_lanes:
        console.print(f"({frame.hidden_lanes} more lane(s) not shown)", style="grey58")
    return 0


def _export(args: argparse.Namespace, portfolio: Portfolio, today) -> int:
    # Imported here so the terminal commands do not pay for matplotlib.
    from .render_svg import render_svg

    intervals = portfolio.intervals()
    if not intervals:
        print("Error: snapshot has no projects to export", file=sys.stderr)
        return 2
    try:
        render_svg(intervals, out_path=args.out, today=today(), title=args.title)
    except Exception as exc:
        print(f"Unexpected error while rendering: {exc}", file=sys.stderr)
        return 1
    logger.info("Wrote %s", args.out)
    return 0


def _run_tui(args: argparse.Namespace, portfolio: Portfolio, config: TimelineConfig, today) -> int:
    from .app import PortfolioDashboard

    session = TimelineSession(today=today, config=config)
    PortfolioDashboard(str(args.snapshot), session, portfolio).run()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
