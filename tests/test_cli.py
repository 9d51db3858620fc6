from __future__ import annotations

import pytest

from walkthrough_engine.__main__ import build_parser


def test_parser_reads_problem_and_flags() -> None:
    args = build_parser().parse_args(
        ["--variant", "fraction-operation", "--operands", "1", "2", "1", "3", "--flag", "operation=subtraction"]
    )
    assert args.variant == "fraction-operation"
    assert args.operands == [1.0, 2.0, 1.0, 3.0]
    assert dict(args.flag) == {"operation": "subtraction"}


@pytest.mark.parametrize("text,expected", [("fast", 1.5), ("fastest", 2.0), ("0.25", 0.25)])
def test_speed_accepts_presets_and_numbers(text, expected) -> None:
    assert build_parser().parse_args(["--speed", text]).speed == expected


@pytest.mark.parametrize("argv", [["--speed", "0"], ["--speed", "warp"], ["--flag", "nokey"], ["--variant", "nope"]])
def test_bad_arguments_exit(argv) -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(argv)


def test_operands_without_variant_is_an_error() -> None:
    from walkthrough_engine.__main__ import main

    with pytest.raises(SystemExit):
        main(["--operands", "1", "2"])
