#!/usr/bin/env python3
"""
hackasm: Hack assembler CLI

Usage:
    python hackasm.py <input.asm> [-o output.hack] [--format hack|bin|listing]
                                  [--force] [--symbols] [-v|-vv|-q] [--log-file PATH]

Output format is auto-detected from file extension:
    .hack      → one line of 16 '0'/'1' characters per word (default)
    .bin       → raw binary, big-endian 16-bit words
    .lst       → listing with ROM addresses, words and source

Without -o the output goes next to the input as <input>.hack.
Use -o - to write to stdout. An existing output file is never
overwritten unless --force is given.

Examples:
    python hackasm.py Add.asm                    # writes Add.hack
    python hackasm.py Max.asm -o Max.lst
    python hackasm.py Pong.asm -o - --symbols -v
"""

from __future__ import annotations
import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from hack_assembler import __version__, Assembler
from hack_assembler.errors import AssemblerError

log = logging.getLogger("hackasm")

FORMAT_BY_EXTENSION = {
    '.hack': 'hack',
    '.bin': 'bin',
    '.lst': 'listing',
}


def setup_logging(verbose: int = 0, quiet: bool = False,
                  log_file: Optional[Path] = None) -> logging.Logger:
    """Configure console (rich) and optional file logging for the CLI."""
    if quiet:
        console_level = logging.ERROR
    elif verbose == 0:
        console_level = logging.WARNING
    elif verbose == 1:
        console_level = logging.INFO
    else:  # -vv or more
        console_level = logging.DEBUG

    handlers: List[logging.Handler] = []

    # ── Console handler ──
    ch = RichHandler(
        console=Console(stderr=True),
        level=console_level,
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    ch.setLevel(console_level)
    handlers.append(ch)

    # ── File handler: captures everything (DEBUG+) ──
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        handlers.append(fh)

    logging.basicConfig(
        level=logging.DEBUG if log_file else console_level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )
    return log


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hackasm",
        description="Two-pass assembler for the Hack computer",
    )
    parser.add_argument("input", help="Input Hack assembly file (.asm)")
    parser.add_argument("-o", "--output",
                        help="Output file (default: <input>.hack, '-' for stdout)")
    parser.add_argument("--format", choices=["hack", "bin", "listing"], default=None,
                        help="Output format (auto-detected from -o extension if not set)")
    parser.add_argument("--force", action="store_true",
                        help="Overwrite an existing output file")
    parser.add_argument("--symbols", action="store_true",
                        help="Print the label and variable table to stderr")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase verbosity (-v, -vv)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only report errors")
    parser.add_argument("--log-file", type=Path, default=None,
                        help="Also write a DEBUG log to this file")
    parser.add_argument("--version", action="version",
                        version=f"hackasm {__version__}")
    return parser


def _output_format(args) -> str:
    if args.format:
        return args.format
    if args.output and args.output != '-':
        return FORMAT_BY_EXTENSION.get(Path(args.output).suffix.lower(), 'hack')
    return 'hack'


def _render(asm: Assembler, out_format: str):
    if out_format == 'bin':
        return asm.to_binary()
    if out_format == 'listing':
        return asm.get_listing()
    return asm.to_hack()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.quiet, args.log_file)

    in_path = Path(args.input)
    if args.output == '-':
        out_path = None
    elif args.output:
        out_path = Path(args.output)
    else:
        out_path = in_path.with_suffix('.hack')
    out_format = _output_format(args)

    log.info("Input:  %s", in_path)
    log.info("Output: %s (%s)", out_path or "<stdout>", out_format)

    # Read input
    try:
        source = in_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: File not found: {in_path}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading {in_path}: {e}", file=sys.stderr)
        return 1

    if out_path is not None and out_path.exists() and not args.force:
        print(f"Error: {out_path} already exists (use --force to overwrite)",
              file=sys.stderr)
        return 1

    try:
        asm = Assembler()
        words = asm.assemble(source)
        result = _render(asm, out_format)
    except AssemblerError as e:
        print(f"{in_path}:{e.line_num}: {e.kind}: {e.message}", file=sys.stderr)
        if e.line_text:
            print(f"    {e.line_text.strip()}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Internal assembler error: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        return 2

    log.info("Assembled %d words, %d labels, %d variables",
             len(words), len(asm.symbols.labels()), len(asm.symbols.variables()))

    if args.symbols:
        sys.stderr.write(asm.get_symbols())

    # Write output
    try:
        if out_path is None:
            if isinstance(result, bytes):
                sys.stdout.buffer.write(result)
                sys.stdout.flush()
            else:
                sys.stdout.write(result)
        else:
            # 'x' fails if the file appeared after the check above
            mode = 'w' if args.force else 'x'
            if isinstance(result, bytes):
                with out_path.open(mode + 'b') as f:
                    f.write(result)
            else:
                with out_path.open(mode, encoding="utf-8") as f:
                    f.write(result)
    except FileExistsError:
        print(f"Error: {out_path} already exists (use --force to overwrite)",
              file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error writing {out_path}: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
