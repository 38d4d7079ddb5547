"""Exceptions raised while loading and disassembling ELF containers."""


class RvelfError(Exception):
    """Base class for all rvelf errors."""


class LoadError(RvelfError):
    """The container is unreadable, truncated or not an ELF file."""


class DecodeError(RvelfError):
    """Decoding failed to advance past *position* in section *section*."""

    def __init__(self, position: int, section: str = ""):
        self.position = position
        self.section = section
        where = f" in {section}" if section else ""
        super().__init__(f"decoder made no progress at file offset 0x{position:x}{where}")
