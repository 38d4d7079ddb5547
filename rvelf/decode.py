"""Field-level RISC-V instruction decoder.

Only the fields the disassembly pipeline needs are extracted: the encoded
length, the control-flow class, the immediate and the register operands.
Compressed (RVC) instructions are expanded to their base-ISA equivalents so
that ``c.j`` and ``jal x0`` look the same to callers. Mnemonic text is left
to the Capstone formatter.
"""
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

from .errors import DecodeError

REG_ZERO = 0
REG_RA = 1
REG_GP = 3

BRANCH_OPS = {0: "beq", 1: "bne", 4: "blt", 5: "bge", 6: "bltu", 7: "bgeu"}
LOAD_OPS = {0: "lb", 1: "lh", 2: "lw", 3: "ld", 4: "lbu", 5: "lhu", 6: "lwu"}
STORE_OPS = {0: "sb", 1: "sh", 2: "sw", 3: "sd"}
FP_LOAD_OPS = {2: "flw", 3: "fld"}
FP_STORE_OPS = {2: "fsw", 3: "fsd"}

# opcodes whose bits 11:7 are not a destination register
NO_RD_OPCODES = {0x23, 0x27, 0x63, 0x0f}


class InstType(Enum):
    BRANCH = "branch"
    JUMP = "jump"
    OTHER = "other"


@dataclass(frozen=True)
class Instruction:
    raw: int
    length: int
    kind: InstType = InstType.OTHER
    op: str = ""
    imm: int = 0
    rd: Optional[int] = None
    rs1: Optional[int] = None
    rs2: Optional[int] = None
    compressed: bool = False

    @property
    def is_control_transfer(self) -> bool:
        return self.kind in (InstType.BRANCH, InstType.JUMP)

    @property
    def encoding(self) -> str:
        """Raw encoding as hex, four digits for RVC and eight for base forms."""
        return f"{self.raw:0{self.length * 2}x}"


def sign_extend(value: int, bits: int) -> int:
    sign = 1 << (bits - 1)
    return (value & (sign - 1)) - (value & sign)


def instruction_length(low: int) -> int:
    """Return the byte length encoded in the low 16 bits of an instruction."""
    if low & 0x3 != 0x3:
        return 2
    if low & 0x1C != 0x1C:
        return 4
    if low & 0x3F == 0x1F:
        return 6
    if low & 0x7F == 0x3F:
        return 8
    return 2


def _imm_i(raw: int) -> int:
    return sign_extend(raw >> 20, 12)


def _imm_s(raw: int) -> int:
    return sign_extend(((raw >> 25) << 5) | ((raw >> 7) & 0x1F), 12)


def _imm_sb(raw: int) -> int:
    imm = ((raw >> 31) & 0x1) << 12
    imm |= ((raw >> 7) & 0x1) << 11
    imm |= ((raw >> 25) & 0x3F) << 5
    imm |= ((raw >> 8) & 0xF) << 1
    return sign_extend(imm, 13)


def _imm_u(raw: int) -> int:
    return sign_extend(raw & 0xFFFFF000, 32)


def _imm_uj(raw: int) -> int:
    imm = ((raw >> 31) & 0x1) << 20
    imm |= ((raw >> 12) & 0xFF) << 12
    imm |= ((raw >> 20) & 0x1) << 11
    imm |= ((raw >> 21) & 0x3FF) << 1
    return sign_extend(imm, 21)


def _imm_cb(raw: int) -> int:
    imm = ((raw >> 12) & 0x1) << 8
    imm |= ((raw >> 10) & 0x3) << 3
    imm |= ((raw >> 5) & 0x3) << 6
    imm |= ((raw >> 3) & 0x3) << 1
    imm |= ((raw >> 2) & 0x1) << 5
    return sign_extend(imm, 9)


def _imm_cj(raw: int) -> int:
    imm = ((raw >> 12) & 0x1) << 11
    imm |= ((raw >> 11) & 0x1) << 4
    imm |= ((raw >> 9) & 0x3) << 8
    imm |= ((raw >> 8) & 0x1) << 10
    imm |= ((raw >> 7) & 0x1) << 6
    imm |= ((raw >> 6) & 0x1) << 7
    imm |= ((raw >> 3) & 0x7) << 1
    imm |= ((raw >> 2) & 0x1) << 5
    return sign_extend(imm, 12)


def _decode_32(raw: int) -> Instruction:
    opcode = raw & 0x7F
    rd = (raw >> 7) & 0x1F
    funct3 = (raw >> 12) & 0x7
    rs1 = (raw >> 15) & 0x1F
    rs2 = (raw >> 20) & 0x1F

    if opcode == 0x63:
        return Instruction(raw, 4, InstType.BRANCH, BRANCH_OPS.get(funct3, ""),
                           _imm_sb(raw), rs1=rs1, rs2=rs2)
    if opcode == 0x6F:
        return Instruction(raw, 4, InstType.JUMP, "jal", _imm_uj(raw), rd=rd)
    if opcode == 0x67:
        return Instruction(raw, 4, op="jalr", imm=_imm_i(raw), rd=rd, rs1=rs1)
    if opcode == 0x17:
        return Instruction(raw, 4, op="auipc", imm=_imm_u(raw), rd=rd)
    if opcode == 0x37:
        return Instruction(raw, 4, op="lui", imm=_imm_u(raw), rd=rd)
    if opcode == 0x13 and funct3 == 0:
        return Instruction(raw, 4, op="addi", imm=_imm_i(raw), rd=rd, rs1=rs1)
    if opcode == 0x1B and funct3 == 0:
        return Instruction(raw, 4, op="addiw", imm=_imm_i(raw), rd=rd, rs1=rs1)
    if opcode == 0x03 and funct3 in LOAD_OPS:
        return Instruction(raw, 4, op=LOAD_OPS[funct3], imm=_imm_i(raw), rd=rd, rs1=rs1)
    if opcode == 0x07 and funct3 in FP_LOAD_OPS:
        # fp destination, does not clobber an integer register
        return Instruction(raw, 4, op=FP_LOAD_OPS[funct3], imm=_imm_i(raw), rs1=rs1)
    if opcode == 0x23 and funct3 in STORE_OPS:
        return Instruction(raw, 4, op=STORE_OPS[funct3], imm=_imm_s(raw), rs1=rs1, rs2=rs2)
    if opcode == 0x27 and funct3 in FP_STORE_OPS:
        return Instruction(raw, 4, op=FP_STORE_OPS[funct3], imm=_imm_s(raw), rs1=rs1, rs2=rs2)
    if opcode in NO_RD_OPCODES:
        return Instruction(raw, 4)
    return Instruction(raw, 4, rd=rd)


def _decode_16(raw: int, xlen: int) -> Instruction:
    quadrant = raw & 0x3
    funct3 = (raw >> 13) & 0x7
    rd_full = (raw >> 7) & 0x1F
    rs2_full = (raw >> 2) & 0x1F
    rs1_prime = 8 + ((raw >> 7) & 0x7)
    rd_prime = 8 + ((raw >> 2) & 0x7)

    if quadrant == 0:
        if funct3 == 2:
            imm = (((raw >> 10) & 0x7) << 3) | (((raw >> 6) & 0x1) << 2) | (((raw >> 5) & 0x1) << 6)
            return Instruction(raw, 2, op="lw", imm=imm, rd=rd_prime, rs1=rs1_prime, compressed=True)
        if funct3 == 3 and xlen == 64:
            imm = (((raw >> 10) & 0x7) << 3) | (((raw >> 5) & 0x3) << 6)
            return Instruction(raw, 2, op="ld", imm=imm, rd=rd_prime, rs1=rs1_prime, compressed=True)
        if funct3 == 0:
            return Instruction(raw, 2, rd=rd_prime, compressed=True)
        return Instruction(raw, 2, compressed=True)

    if quadrant == 1:
        if funct3 == 0:
            imm = sign_extend((((raw >> 12) & 0x1) << 5) | rs2_full, 6)
            return Instruction(raw, 2, op="addi", imm=imm, rd=rd_full, rs1=rd_full, compressed=True)
        if funct3 == 1 and xlen == 32:
            return Instruction(raw, 2, InstType.JUMP, "jal", _imm_cj(raw), rd=REG_RA, compressed=True)
        if funct3 == 5:
            return Instruction(raw, 2, InstType.JUMP, "jal", _imm_cj(raw), rd=REG_ZERO, compressed=True)
        if funct3 in (6, 7):
            return Instruction(raw, 2, InstType.BRANCH, "beq" if funct3 == 6 else "bne",
                               _imm_cb(raw), rs1=rs1_prime, rs2=REG_ZERO, compressed=True)
        if funct3 == 4:
            return Instruction(raw, 2, rd=rs1_prime, compressed=True)
        return Instruction(raw, 2, rd=rd_full, compressed=True)

    # quadrant 2
    if funct3 == 4 and rs2_full == 0 and rd_full != 0:
        link = REG_RA if (raw >> 12) & 0x1 else REG_ZERO
        return Instruction(raw, 2, op="jalr", imm=0, rd=link, rs1=rd_full, compressed=True)
    if funct3 in (0, 2, 3, 4):
        if funct3 == 3 and xlen == 32:
            return Instruction(raw, 2, compressed=True)
        return Instruction(raw, 2, rd=rd_full, compressed=True)
    return Instruction(raw, 2, compressed=True)


def decode(data: bytes, pos: int, xlen: int = 64, end: Optional[int] = None) -> Tuple[Instruction, int]:
    """Decode one instruction at *pos* and return it with the next position.

    Bytes at or beyond *end* (default: end of *data*) are never read. A tail
    too short for its encoded length decodes as an opaque ``OTHER`` covering
    the remaining bytes.
    """
    if end is None:
        end = len(data)
    available = end - pos
    if available <= 0:
        return Instruction(0, 0), pos
    if available < 2:
        return Instruction(data[pos], 1), pos + 1

    (low,) = struct.unpack_from("<H", data, pos)
    length = instruction_length(low)
    if length > available:
        raw = int.from_bytes(data[pos:end], "little")
        return Instruction(raw, available), end
    if length == 2:
        return _decode_16(low, xlen), pos + 2
    if length == 4:
        (raw,) = struct.unpack_from("<I", data, pos)
        return _decode_32(raw), pos + 4
    raw = int.from_bytes(data[pos:pos + length], "little")
    return Instruction(raw, length), pos + length


def iter_instructions(data: bytes, region, xlen: int = 64, decoder=decode) -> Iterator[Tuple[int, Instruction]]:
    """Yield ``(position, instruction)`` for every instruction in *region*.

    Raises DecodeError if *decoder* fails to move forward.
    """
    pos = region.offset
    while pos < region.end:
        inst, next_pos = decoder(data, pos, xlen, region.end)
        if next_pos <= pos:
            raise DecodeError(pos, region.name)
        yield pos, inst
        pos = next_pos
