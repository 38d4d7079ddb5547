"""Read-only view of an ELF container, loaded with LIEF."""
import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import lief

from .errors import LoadError

ELF_MAGIC = b"\x7fELF"
EI_NIDENT = 16
EI_CLASS = 4
EI_DATA = 5
E_MACHINE = 18
ELFDATA2MSB = 2
ELFCLASS32 = 1
ELFCLASS64 = 2
EM_RISCV = 243
SHF_EXECINSTR = 0x4


def _enum_name(value) -> str:
    """``Section.TYPE.PROGBITS`` -> ``PROGBITS`` across LIEF enum flavours."""
    name = getattr(value, "name", None)
    if isinstance(name, str) and name:
        return name
    return str(value).rsplit(".", 1)[-1]


def _enum_int(value) -> int:
    return int(getattr(value, "value", value))


@dataclass(frozen=True)
class Section:
    index: int
    name: str
    type: str
    flags: int
    address: int
    offset: int
    size: int
    entsize: int = 0
    align: int = 0

    @property
    def executable(self) -> bool:
        return bool(self.flags & SHF_EXECINSTR)


@dataclass(frozen=True)
class Segment:
    type: str
    flags: int
    offset: int
    virtual_address: int
    physical_address: int
    file_size: int
    memory_size: int
    align: int


@dataclass(frozen=True)
class Symbol:
    name: str
    value: int
    size: int = 0
    type: str = "NOTYPE"
    binding: str = "LOCAL"
    shndx: int = 0


@dataclass(frozen=True)
class Region:
    """Executable bytes ``[offset, offset + size)`` mapped at *address*."""

    index: int
    name: str
    offset: int
    size: int
    address: int

    @property
    def end(self) -> int:
        return self.offset + self.size

    @property
    def load_offset(self) -> int:
        return self.offset - self.address

    def address_of(self, pos: int) -> int:
        return pos - self.load_offset


@dataclass
class Container:
    path: Path
    data: bytes
    machine: int
    elf_class: int = ELFCLASS64
    header: Dict[str, str] = field(default_factory=dict)
    sections: List[Section] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)
    symbols: List[Symbol] = field(default_factory=list)

    @property
    def is_riscv(self) -> bool:
        return self.machine == EM_RISCV

    @property
    def xlen(self) -> int:
        return 32 if self.elf_class == ELFCLASS32 else 64

    def executable_regions(self) -> List[Region]:
        return [
            Region(s.index, s.name, s.offset, s.size, s.address)
            for s in self.sections
            if s.executable and s.type != "NOBITS"
        ]

    def symbol_by_addr(self, addr: int) -> Optional[Symbol]:
        for sym in self.symbols:
            if sym.name and sym.value == addr:
                return sym
        return None

    def symbol_by_name(self, name: str) -> Optional[Symbol]:
        for sym in self.symbols:
            if sym.name == name:
                return sym
        return None


def _machine(data: bytes) -> int:
    fmt = ">H" if data[EI_DATA] == ELFDATA2MSB else "<H"
    return struct.unpack_from(fmt, data, E_MACHINE)[0]


def _header_fields(header) -> Dict[str, str]:
    return {
        "Class": _enum_name(header.identity_class),
        "Data": _enum_name(header.identity_data),
        "OS/ABI": _enum_name(header.identity_os_abi),
        "Type": _enum_name(header.file_type),
        "Machine": _enum_name(header.machine_type),
        "Version": _enum_name(header.object_file_version),
        "Entry point": f"0x{header.entrypoint:x}",
        "Program headers offset": f"0x{header.program_header_offset:x}",
        "Section headers offset": f"0x{header.section_header_offset:x}",
        "Flags": f"0x{_enum_int(header.processor_flag):x}",
        "ELF header size": str(header.header_size),
        "Program header size": str(header.program_header_size),
        "Program header count": str(header.numberof_segments),
        "Section header size": str(header.section_header_size),
        "Section header count": str(header.numberof_sections),
        "Section name table index": str(header.section_name_table_idx),
    }


def _check_table(path: Path, data: bytes, what: str, offset: int, count: int, entsize: int) -> None:
    if count and offset + count * entsize > len(data):
        raise LoadError(f"{path} is truncated: {what} table ends past end of file")


def _symbol_table(binary) -> list:
    """Entries of ``.symtab``, or of ``.dynsym`` when the file is stripped."""
    static = getattr(binary, "symtab_symbols", None)
    if static is None:
        # LIEF < 0.14
        static = binary.static_symbols
    static = list(static)
    return static if static else list(binary.dynamic_symbols)


def load_container(path) -> Container:
    """Parse the ELF file at *path*.

    Raises LoadError if the file cannot be read, is not ELF, or has header
    tables or section contents running past the end of the file.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise LoadError(f"Could not read {path}: {exc.strerror}") from exc
    if len(data) < EI_NIDENT or data[:4] != ELF_MAGIC:
        raise LoadError(f"{path} is not an ELF file")
    if data[EI_CLASS] not in (ELFCLASS32, ELFCLASS64):
        raise LoadError(f"{path} has unknown ELF class {data[EI_CLASS]}")

    binary = lief.ELF.parse(str(path))
    if binary is None:
        raise LoadError(f"Could not parse {path}")

    header = binary.header
    _check_table(path, data, "section header", header.section_header_offset,
                 header.numberof_sections, header.section_header_size)
    _check_table(path, data, "program header", header.program_header_offset,
                 header.numberof_segments, header.program_header_size)
    if len(binary.sections) != header.numberof_sections:
        raise LoadError(f"{path} is truncated: parsed {len(binary.sections)} of "
                        f"{header.numberof_sections} sections")

    sections = []
    for index, sec in enumerate(binary.sections):
        section = Section(
            index=index,
            name=sec.name,
            type=_enum_name(sec.type),
            flags=_enum_int(sec.flags),
            address=sec.virtual_address,
            offset=sec.offset,
            size=sec.size,
            entsize=sec.entry_size,
            align=sec.alignment,
        )
        if section.type != "NOBITS" and section.offset + section.size > len(data):
            raise LoadError(f"{path} is truncated: section {section.name} ends past end of file")
        sections.append(section)

    segments = [
        Segment(
            type=_enum_name(seg.type),
            flags=_enum_int(seg.flags),
            offset=seg.file_offset,
            virtual_address=seg.virtual_address,
            physical_address=seg.physical_address,
            file_size=seg.physical_size,
            memory_size=seg.virtual_size,
            align=seg.alignment,
        )
        for seg in binary.segments
    ]

    symbols = [
        Symbol(
            name=sym.name,
            value=sym.value,
            size=sym.size,
            type=_enum_name(sym.type),
            binding=_enum_name(sym.binding),
            shndx=sym.shndx,
        )
        for sym in _symbol_table(binary)
    ]

    container = Container(
        path=path,
        data=data,
        machine=_machine(data),
        elf_class=data[EI_CLASS],
        header=_header_fields(header),
        sections=sections,
        segments=segments,
        symbols=symbols,
    )
    logging.info("Parsed %s: %d sections, %d segments, %d symbols",
                 path, len(sections), len(segments), len(symbols))
    return container
