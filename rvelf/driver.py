"""Run the requested reports over a loaded container."""
import logging
import sys
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .color import Colorizer, make_colorizer
from .config import DEFAULTS
from .container import Container
from .format import CapstoneFormatter
from .labels import scan_labels
from .printer import DisassemblyPrinter
from .report import (
    print_elf_header,
    print_heading,
    print_program_headers,
    print_section_headers,
    print_symbol_table,
)
from .resolve import NameResolver


@dataclass
class Options:
    elf_header: bool = False
    section_headers: bool = False
    program_headers: bool = False
    symbol_table: bool = False
    disassembly: bool = False
    color: bool = False

    @classmethod
    def everything(cls, color: bool = False) -> "Options":
        return cls(True, True, True, True, True, color)

    def any_output(self) -> bool:
        return any((self.elf_header, self.section_headers, self.program_headers,
                    self.symbol_table, self.disassembly))


def find_global_pointer(container: Container, names: Iterable[str]) -> Optional[int]:
    """Return the value of the first global-pointer symbol present, if any."""
    for name in names:
        sym = container.symbol_by_name(name)
        if sym is not None:
            return sym.value
    return None


def disassemble(container: Container, config: dict, colorize: Colorizer, out, formatter=None) -> None:
    regions = container.executable_regions()
    # every region is scanned before any is printed so forward targets resolve
    labels = scan_labels(
        regions,
        container.data,
        container.xlen,
        label_format=config["label_format"],
        scope=config["label_scope"],
    )
    logging.info("Found %d branch targets in %d executable sections", len(labels), len(regions))

    printer = DisassemblyPrinter(
        container.data,
        NameResolver(container.symbols, labels),
        formatter if formatter is not None else CapstoneFormatter(container.xlen),
        colorize,
        xlen=container.xlen,
        history_size=config["history_size"],
        out=out,
    )
    for region in regions:
        printer.print_title(region)
        gp = find_global_pointer(container, config["gp_symbols"])
        if gp is None:
            logging.debug("No global pointer symbol for %s", region.name)
        printer.print_region(region, gp)


def run(container: Container, options: Options, config: Optional[dict] = None, out=None,
        isatty: Optional[Callable[[], bool]] = None, formatter=None) -> None:
    config = config if config is not None else dict(DEFAULTS)
    out = out if out is not None else sys.stdout
    isatty = isatty if isatty is not None else out.isatty
    colorize = make_colorizer(options.color or bool(config["color"]), isatty)

    if options.elf_header:
        print_heading("ELF Header", colorize, out)
        print_elf_header(container, colorize, out)
    if options.section_headers:
        print_heading("Section Headers", colorize, out)
        print_section_headers(container, colorize, out)
    if options.program_headers:
        print_heading("Program Headers", colorize, out)
        print_program_headers(container, colorize, out)
    if options.symbol_table:
        print_heading("Symbol Table", colorize, out)
        print_symbol_table(container, colorize, out)
    if options.disassembly:
        if container.is_riscv:
            print_heading("Disassembly", colorize, out)
            disassemble(container, config, colorize, out, formatter)
        else:
            logging.info("Skipping disassembly: machine %d is not RISC-V", container.machine)
    out.write("\n")
