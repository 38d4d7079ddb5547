"""Inspect RISC-V ELF files and print a labelled disassembly."""
from .container import Container, Region, Section, Segment, Symbol, load_container
from .decode import Instruction, InstType, decode
from .driver import Options, run
from .errors import DecodeError, LoadError, RvelfError
from .labels import scan_labels
from .resolve import NameResolver

__all__ = [
    "Container",
    "DecodeError",
    "Instruction",
    "InstType",
    "LoadError",
    "NameResolver",
    "Options",
    "Region",
    "RvelfError",
    "Section",
    "Segment",
    "Symbol",
    "decode",
    "load_container",
    "run",
    "scan_labels",
]
