"""Mnemonic and operand text for RISC-V instructions, produced by Capstone."""
from typing import Tuple

from capstone import CS_ARCH_RISCV, CS_MODE_RISCV32, CS_MODE_RISCV64, CS_MODE_RISCVC, Cs


class CapstoneFormatter:
    """Render one instruction's text with Capstone's RISC-V backend."""

    def __init__(self, xlen: int = 64):
        mode = CS_MODE_RISCV64 if xlen == 64 else CS_MODE_RISCV32
        self.md = Cs(CS_ARCH_RISCV, mode | CS_MODE_RISCVC)
        self.md.detail = False

    def text(self, code: bytes, address: int) -> Tuple[str, str]:
        """Return ``(mnemonic, operands)`` for the instruction in *code*."""
        for insn in self.md.disasm(code, address, 1):
            return insn.mnemonic, insn.op_str
        return "illegal", ""
