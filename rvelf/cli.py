"""Print ELF headers, symbols and a labelled RISC-V disassembly.

Usage:
    rvelf [-c] [-e] [-s] [-p] [-t] [-d | -a] <elf_file>
"""
import argparse
import logging
import sys
from pathlib import Path

from .config import load_config
from .container import load_container
from .driver import Options, run
from .errors import DecodeError, LoadError


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="rvelf", description="Inspect and disassemble RISC-V ELF files")
    ap.add_argument("elf_file")
    ap.add_argument("-c", "--color", action="store_true", help="Enable color")
    ap.add_argument("-e", "--print-elf-header", action="store_true", help="Print ELF header")
    ap.add_argument("-s", "--print-section-headers", action="store_true", help="Print section headers")
    ap.add_argument("-p", "--print-program-headers", action="store_true", help="Print program headers")
    ap.add_argument("-t", "--print-symbol-table", action="store_true", help="Print symbol table")
    ap.add_argument("-d", "--print-disassembly", action="store_true", help="Print disassembly")
    ap.add_argument("-a", "--print-all", action="store_true", help="Print all")
    ap.add_argument("--config", type=Path, default=None, help="Path to a JSON config file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log debug messages to stderr")
    return ap


def main(argv=None) -> None:
    ap = build_parser()
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if args.print_all:
        options = Options.everything(color=args.color)
    else:
        options = Options(
            elf_header=args.print_elf_header,
            section_headers=args.print_section_headers,
            program_headers=args.print_program_headers,
            symbol_table=args.print_symbol_table,
            disassembly=args.print_disassembly,
            color=args.color,
        )
    if not options.any_output():
        ap.error("nothing to print; choose at least one of -e -s -p -t -d -a")

    try:
        config = load_config(args.config)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}")

    try:
        container = load_container(args.elf_file)
        run(container, options, config, out=sys.stdout)
    except (LoadError, DecodeError) as exc:
        raise SystemExit(f"Error: {exc}")


if __name__ == "__main__":
    main()
