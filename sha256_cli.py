"""Command line front end for the SHA-256 stage tracer.

Usage:
    sha256-stages "message"
    sha256-stages -f path/to/file
    sha256-stages "abc" --paced                  # replay stages with delays
    sha256-stages "abc" --format digest          # only the final digest
    sha256-stages "abc" --format yaml -o abc.yaml
    sha256-stages "abc" --format sqlite -o abc.db

The default output prints every stage (binary form, padded form, and for
each block its schedule, 64 rounds and updated registers) as it is
computed, followed by the final hex digest.

Exit status: 0 on success, 1 on missing input or I/O errors, 2 on invalid
arguments, 3 when the input cannot be hashed.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Callable, Iterable, Iterator, List, Optional

from preprocess import ENCODINGS
from sha256_errors import HashComputationError
from stages import (
    BinaryForm,
    BlockDigest,
    FinalDigest,
    REGISTER_NAMES,
    PaddedForm,
    RoundRecord,
    Schedule,
    Stage,
    collect_trace,
    iter_stages,
)
from trace_export import write_sqlite, write_yaml
from tracer_config import TracerConfig, load_config


logger = logging.getLogger(__name__)

FORMATS = ("text", "digest", "yaml", "sqlite")

_BITS_PER_LINE = 64
_WORDS_PER_LINE = 8


def paced(
    stages: Iterable[Stage],
    stage_delay: float,
    round_delay: float,
    sleep: Optional[Callable[[float], None]] = None,
) -> Iterator[Stage]:
    """Re-yield `stages`, pausing after each one so a reader can follow along.

    Binary, padded and schedule stages are followed by `stage_delay`
    seconds, each round record by `round_delay`. Pacing never changes the
    stages themselves.
    """
    if sleep is None:
        sleep = time.sleep
    for stage in stages:
        yield stage
        if isinstance(stage, RoundRecord):
            delay = round_delay
        elif isinstance(stage, (BinaryForm, PaddedForm, Schedule)):
            delay = stage_delay
        else:
            delay = 0
        if delay > 0:
            sleep(delay)


def _wrap(text: str, width: int) -> List[str]:
    return [text[i : i + width] for i in range(0, len(text), width)] or ["(empty)"]


def _format_words(words, label: str) -> List[str]:
    """Format as 8 words per line for readability"""
    lines = []
    for i in range(0, len(words), _WORDS_PER_LINE):
        chunk = words[i : i + _WORDS_PER_LINE]
        lines.append(f"  {label}[{i:2d}..{i + len(chunk) - 1:2d}]: {' '.join(chunk)}")
    return lines


def format_stage(stage: Stage) -> str:
    """Return the human-readable text for one stage."""
    if isinstance(stage, BinaryForm):
        lines = [f"=== Binary form ({len(stage.bits)} bits) ==="]
        lines += ["  " + chunk for chunk in _wrap(stage.bits, _BITS_PER_LINE)]
    elif isinstance(stage, PaddedForm):
        lines = [f"=== Padded form ({len(stage.bits)} bits) ==="]
        lines += ["  " + chunk for chunk in _wrap(stage.bits, _BITS_PER_LINE)]
    elif isinstance(stage, Schedule):
        lines = [f"=== Block {stage.block}: message schedule ==="]
        lines += _format_words(stage.words, "w")
    elif isinstance(stage, RoundRecord):
        registers = " ".join(
            f"{name}={value}" for name, value in zip(REGISTER_NAMES, stage.registers())
        )
        lines = [
            f"  round {stage.round:2d}: {registers} | "
            f"S0={stage.S0} S1={stage.S1} ch={stage.ch} maj={stage.maj} "
            f"temp1={stage.temp1} temp2={stage.temp2}"
        ]
    elif isinstance(stage, BlockDigest):
        lines = [f"=== Block {stage.block}: updated hash registers ==="]
        lines += _format_words(stage.registers, "H")
    elif isinstance(stage, FinalDigest):
        lines = [f"final digest: {stage.digest}"]
    else:
        raise TypeError(f"Unknown stage type: {type(stage).__name__}")
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sha256-stages",
        description="Compute SHA-256 of a text and show every intermediate stage",
    )
    parser.add_argument("text", nargs="?", help="Text to hash")
    parser.add_argument("-f", "--file", help="Read the text to hash from a UTF-8 file")
    parser.add_argument(
        "--encoding",
        choices=ENCODINGS,
        default=None,
        help="How characters become bits (default: strict)",
    )
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument("-o", "--output", help="Output path for yaml or sqlite")
    parser.add_argument(
        "--paced",
        action="store_true",
        default=None,
        help="Pause between stages when printing text output",
    )
    parser.add_argument("--stage-delay", type=float, default=None, help="Seconds after each major stage")
    parser.add_argument("--round-delay", type=float, default=None, help="Seconds after each round")
    parser.add_argument("--config", help="YAML settings file")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for debug)",
    )
    return parser


def _read_text(args) -> str:
    if args.file is not None:
        with open(args.file, "r", encoding="utf-8") as f:
            return f.read()
    return args.text


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )

    if (args.text is None) == (args.file is None):
        sys.stderr.write("Provide either a text argument or -f path/to/file\n")
        return 1
    if args.format == "sqlite" and not args.output:
        sys.stderr.write("--format sqlite requires -o path/to/output.db\n")
        return 1

    try:
        config = load_config(args.config).with_overrides(
            encoding=args.encoding,
            paced=args.paced,
            stage_delay=args.stage_delay,
            round_delay=args.round_delay,
        )
    except (OSError, ValueError, TypeError) as e:
        sys.stderr.write(f"Error loading config: {e}\n")
        return 1

    try:
        text = _read_text(args)
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"Error reading file '{args.file}': {e}\n")
        return 1

    try:
        return _run(args, config, text)
    except HashComputationError as e:
        sys.stderr.write(f"Cannot hash input: {e}\n")
        return 3
    except OSError as e:
        sys.stderr.write(f"Error writing output: {e}\n")
        return 1


def _run(args, config: TracerConfig, text: str) -> int:
    if args.format in ("yaml", "sqlite"):
        trace = collect_trace(text, encoding=config.encoding)
        if args.format == "sqlite":
            write_sqlite(trace, args.output)
        else:
            write_yaml(trace, args.output or sys.stdout)
        if args.output:
            print(trace.digest)
        return 0

    stages = iter_stages(text, encoding=config.encoding)
    if config.paced and args.format == "text":
        logger.debug(
            "Pacing output: %.2fs per stage, %.2fs per round",
            config.stage_delay,
            config.round_delay,
        )
        stages = paced(stages, config.stage_delay, config.round_delay)

    for stage in stages:
        if args.format == "text":
            print(format_stage(stage), flush=True)
        elif isinstance(stage, FinalDigest):
            print(stage.digest)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
