"""Headings and the header/section/segment/symbol tables."""
from .color import Colorizer
from .container import Container

HEADING_WIDTH = 116

SECTION_FLAGS = [
    (0x1, "W"), (0x2, "A"), (0x4, "X"), (0x10, "M"), (0x20, "S"),
    (0x40, "I"), (0x80, "L"), (0x200, "G"), (0x400, "T"),
]
PF_X, PF_W, PF_R = 0x1, 0x2, 0x4


def section_flags(flags: int) -> str:
    return "".join(letter for bit, letter in SECTION_FLAGS if flags & bit)


def segment_flags(flags: int) -> str:
    return "".join(
        letter if flags & bit else "-"
        for bit, letter in ((PF_R, "R"), (PF_W, "W"), (PF_X, "X"))
    )


def print_heading(heading: str, colorize: Colorizer, out) -> None:
    rule = "-" * max(0, HEADING_WIDTH - len(heading))
    out.write("\n" + colorize("header", f"---[ {heading} ]{rule}") + "\n\n")


def print_elf_header(container: Container, colorize: Colorizer, out) -> None:
    for key, value in container.header.items():
        out.write(colorize("legend", f"{key + ':':<28}") + f"{value}\n")


def print_section_headers(container: Container, colorize: Colorizer, out) -> None:
    out.write(colorize(
        "legend",
        f"{'[Nr]':>5} {'Name':<24} {'Type':<16} {'Flags':<6} {'Address':>18} "
        f"{'Offset':>10} {'Size':>10} {'EntSize':>8} {'Align':>6}",
    ) + "\n")
    for sec in container.sections:
        out.write(
            f"{'[' + str(sec.index) + ']':>5} {sec.name:<24} {sec.type:<16} {section_flags(sec.flags):<6} "
            f"{sec.address:#18x} {sec.offset:#10x} {sec.size:#10x} {sec.entsize:>8} {sec.align:>6}\n"
        )


def print_program_headers(container: Container, colorize: Colorizer, out) -> None:
    out.write(colorize(
        "legend",
        f"{'Type':<16} {'Flags':<5} {'Offset':>10} {'VirtAddr':>18} {'PhysAddr':>18} "
        f"{'FileSiz':>10} {'MemSiz':>10} {'Align':>8}",
    ) + "\n")
    for seg in container.segments:
        out.write(
            f"{seg.type:<16} {segment_flags(seg.flags):<5} {seg.offset:#10x} {seg.virtual_address:#18x} "
            f"{seg.physical_address:#18x} {seg.file_size:#10x} {seg.memory_size:#10x} {seg.align:#8x}\n"
        )


def print_symbol_table(container: Container, colorize: Colorizer, out) -> None:
    out.write(colorize(
        "legend",
        f"{'Num':>6} {'Value':>18} {'Size':>8} {'Type':<8} {'Bind':<8} {'Ndx':>6} Name",
    ) + "\n")
    for num, sym in enumerate(container.symbols):
        out.write(
            f"{num:>6} {sym.value:#18x} {sym.size:>8} {sym.type:<8} {sym.binding:<8} {sym.shndx:>6} "
            + colorize("symbol", sym.name) + "\n"
        )
