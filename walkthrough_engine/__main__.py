from __future__ import annotations

import argparse
import logging

from .app import run
from .registry import WALKTHROUGHS
from .timeline import DEFAULT_TICK_PERIOD_MS, SPEED_MULTIPLIERS


def _parse_flag(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {text!r}")
    return key.strip(), value.strip()


def _parse_speed(text: str) -> float:
    if text in SPEED_MULTIPLIERS:
        return SPEED_MULTIPLIERS[text]
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"speed must be a number or one of {', '.join(SPEED_MULTIPLIERS)}"
        ) from None
    if value <= 0:
        raise argparse.ArgumentTypeError("speed must be > 0")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="walkthrough_engine",
        description="Animated step-by-step math walkthroughs.",
    )
    parser.add_argument(
        "--variant",
        choices=sorted(WALKTHROUGHS),
        help="walkthrough to open directly (default: show the example menu)",
    )
    parser.add_argument(
        "--operands",
        type=float,
        nargs="+",
        default=[],
        metavar="N",
        help="problem operands, in the order the variant expects",
    )
    parser.add_argument(
        "--flag",
        type=_parse_flag,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="variant option, e.g. operation=subtraction or side=left (repeatable)",
    )
    parser.add_argument("--speed", type=_parse_speed, default=1.0, help="playback speed multiplier or preset name")
    parser.add_argument("--period-ms", type=float, default=DEFAULT_TICK_PERIOD_MS, help="base tick period")
    parser.add_argument("--paused", action="store_true", help="start paused")
    parser.add_argument("--max-frames", type=int, default=None, help="exit after this many frames")
    parser.add_argument("--mute", action="store_true", help="disable sound cues")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for running the walkthroughs from the command line."""

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.operands and args.variant is None:
        build_parser().error("--operands requires --variant")

    return run(
        max_frames=args.max_frames,
        variant=args.variant,
        operands=tuple(args.operands),
        flags=dict(args.flag),
        speed=args.speed,
        period_ms=args.period_ms,
        paused=args.paused,
        mute=args.mute,
    )


if __name__ == "__main__":
    raise SystemExit(main())
