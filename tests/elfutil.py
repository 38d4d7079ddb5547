"""Build tiny ELF64 little-endian files for tests."""
import struct
from typing import Iterable, List, Sequence, Tuple

EM_RISCV = 243
EM_X86_64 = 62
SHN_ABS = 0xFFF1
BASE = 0x10000

SHT_PROGBITS = 1
SHT_SYMTAB = 2
SHT_STRTAB = 3
SHF_ALLOC = 0x2
SHF_EXECINSTR = 0x4


def words(*values: int) -> bytes:
    """Pack 32-bit instruction words little-endian."""
    return b"".join(struct.pack("<I", v) for v in values)


def _align(buf: bytearray, alignment: int) -> None:
    while len(buf) % alignment:
        buf.append(0)


def _strtab(names: Iterable[str]) -> Tuple[bytes, List[int]]:
    blob = bytearray(b"\x00")
    offsets = []
    for name in names:
        if not name:
            offsets.append(0)
            continue
        offsets.append(len(blob))
        blob += name.encode("ascii") + b"\x00"
    return bytes(blob), offsets


def build_elf(
    code_sections: Sequence[Tuple[str, bytes]],
    symbols: Sequence[Tuple[str, int, int]] = (),
    machine: int = EM_RISCV,
) -> Tuple[bytes, List[int]]:
    """Return ``(image, addresses)`` for an executable with one PT_LOAD.

    *code_sections* are ``(name, bytes)`` pairs laid out back to back and
    mapped at ``BASE + file offset``. *symbols* are ``(name, value, shndx)``.
    """
    ehsize, phentsize, shentsize = 64, 56, 64
    image = bytearray(ehsize + phentsize)

    placed = []
    for name, code in code_sections:
        _align(image, 4)
        placed.append((name, len(image), code))
        image += code
    addresses = [BASE + offset for _, offset, _ in placed]

    sym_names, sym_offsets = _strtab(name for name, _, _ in symbols)
    symtab = bytearray(24)
    for (name, value, shndx), name_off in zip(symbols, sym_offsets):
        # STB_GLOBAL, STT_FUNC for code, STT_NOTYPE for absolute symbols
        info = (1 << 4) | (0 if shndx == SHN_ABS else 2)
        symtab += struct.pack("<IBBHQQ", name_off, info, 0, shndx, value, 0)

    _align(image, 8)
    symtab_off = len(image)
    image += symtab
    strtab_off = len(image)
    image += sym_names

    sec_names = [name for name, _, _ in placed] + [".symtab", ".strtab", ".shstrtab"]
    shstrtab, sec_name_offs = _strtab(sec_names)
    shstrtab_off = len(image)
    image += shstrtab

    _align(image, 8)
    shoff = len(image)
    n_code = len(placed)
    headers = [struct.pack("<IIQQQQIIQQ", 0, 0, 0, 0, 0, 0, 0, 0, 0, 0)]
    for (name, offset, code), name_off in zip(placed, sec_name_offs):
        headers.append(struct.pack("<IIQQQQIIQQ", name_off, SHT_PROGBITS, SHF_ALLOC | SHF_EXECINSTR,
                                   BASE + offset, offset, len(code), 0, 0, 4, 0))
    headers.append(struct.pack("<IIQQQQIIQQ", sec_name_offs[n_code], SHT_SYMTAB, 0, 0,
                               symtab_off, len(symtab), n_code + 2, 1, 8, 24))
    headers.append(struct.pack("<IIQQQQIIQQ", sec_name_offs[n_code + 1], SHT_STRTAB, 0, 0,
                               strtab_off, len(sym_names), 0, 0, 1, 0))
    headers.append(struct.pack("<IIQQQQIIQQ", sec_name_offs[n_code + 2], SHT_STRTAB, 0, 0,
                               shstrtab_off, len(shstrtab), 0, 0, 1, 0))
    for header in headers:
        image += header

    first = placed[0][1] if placed else ehsize + phentsize
    load_end = placed[-1][1] + len(placed[-1][2]) if placed else first
    ident = b"\x7fELF" + bytes([2, 1, 1, 0]) + bytes(8)
    struct.pack_into("<16sHHIQQQIHHHHHH", image, 0, ident, 2, machine, 1,
                     addresses[0] if addresses else 0, ehsize, shoff, 0x5,
                     ehsize, phentsize, 1, shentsize, len(headers), len(headers) - 1)
    # PT_LOAD, R+X
    struct.pack_into("<IIQQQQQQ", image, ehsize, 1, 5, first, BASE + first, BASE + first,
                     load_end - first, load_end - first, 0x1000)
    return bytes(image), addresses
