"""Listing printer for executable regions.

The printer walks each region again (independently of the label scan) and
writes one line per instruction::

    address:  encoding  label:   mnemonic operands  # annotation

A short window of recently decoded instructions is kept per region so that
``auipc`` pairs can be rendered as the absolute address they build.
"""
import sys
from collections import deque
from typing import Deque, Optional, Tuple

from .color import Colorizer, plain
from .container import Region
from .decode import REG_GP, Instruction, decode, iter_instructions

ADDRESS_OPS = {
    "addi", "addiw", "jalr",
    "lb", "lh", "lw", "ld", "lbu", "lhu", "lwu", "flw", "fld",
    "sb", "sh", "sw", "sd", "fsw", "fsd",
}
LABEL_WIDTH = 24
MNEMONIC_WIDTH = 8


class DisassemblyPrinter:
    def __init__(self, data: bytes, resolver, formatter, colorize: Colorizer = plain,
                 xlen: int = 64, decoder=decode, history_size: int = 4, out=None):
        if history_size < 1:
            raise ValueError("history_size must be at least 1")
        self.data = data
        self.resolver = resolver
        self.colorize = colorize
        self.formatter = formatter
        self.xlen = xlen
        self.decoder = decoder
        self.mask = (1 << xlen) - 1
        self.out = out if out is not None else sys.stdout
        self.history: Deque[Tuple[int, Instruction]] = deque(maxlen=history_size)

    def print_title(self, region: Region) -> None:
        self.out.write(self.colorize("title", f"Section[{region.index:2d}] {region.name:<111}") + "\n")

    def print_region(self, region: Region, gp: Optional[int] = None) -> None:
        """Write the listing for *region*; *gp* enables gp-relative annotations."""
        self.history.clear()
        for pos, inst in iter_instructions(self.data, region, self.xlen, self.decoder):
            addr = region.address_of(pos)
            self.history.append((addr, inst))
            code = bytes(self.data[pos:pos + inst.length])
            self.out.write(self.format_line(addr, inst, code, gp) + "\n")

    def format_line(self, addr: int, inst: Instruction, code: bytes, gp: Optional[int] = None) -> str:
        c = self.colorize
        name = self.resolver.resolve(addr)
        label = f"{name}:" if name else ""
        mnemonic, operands = self.formatter.text(code, addr)
        if inst.is_control_transfer:
            operands = self._with_target(operands, (addr + inst.imm) & self.mask)
        comment = self._annotation(inst, gp)

        line = (
            c("address", f"{addr:16x}:")
            + f"  {inst.encoding:<8}  "
            + c("location", label)
            + " " * max(1, LABEL_WIDTH - len(label))
            + c("opcode", mnemonic)
        )
        if operands:
            line += " " * max(1, MNEMONIC_WIDTH - len(mnemonic)) + operands
        if comment:
            line += "  " + comment
        return line

    def _with_target(self, operands: str, target: int) -> str:
        name = self.resolver.resolve(target)
        rendered = self.colorize("symbol", name) if name else f"0x{target:x}"
        # the last operand is the pc-relative offset
        parts = operands.split(", ")[:-1] if operands else []
        parts.append(rendered)
        return ", ".join(parts)

    def _pcrel_address(self, inst: Instruction) -> Optional[int]:
        if inst.op not in ADDRESS_OPS or inst.rs1 is None:
            return None
        previous = list(self.history)[:-1]
        for addr, prior in reversed(previous):
            if prior.op == "auipc" and prior.rd == inst.rs1:
                return (addr + prior.imm + inst.imm) & self.mask
            if prior.rd == inst.rs1:
                return None
            # a branch target in between can be entered without the auipc
            if addr in self.resolver.labels:
                return None
        return None

    def _annotation(self, inst: Instruction, gp: Optional[int]) -> str:
        target = self._pcrel_address(inst)
        if target is None and gp is not None and inst.rs1 == REG_GP and inst.op in ADDRESS_OPS:
            target = (gp + inst.imm) & self.mask
        if target is None:
            return ""
        text = f"# 0x{target:x}"
        name = self.resolver.resolve(target)
        if name:
            text += " " + self.colorize("symbol", f"<{name}>")
        return text
