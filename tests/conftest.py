from pathlib import Path

import pytest

from elfutil import BASE, EM_RISCV, EM_X86_64, SHN_ABS, build_elf, words

NOP = 0x00000013

# 0x00: _start:  auipc a0, 0
# 0x04:          addi  a0, a0, 16      -> helper
# 0x08:          beq   a0, a1, 8       -> helper
# 0x0c:          j     -8              -> 0x04
# 0x10: helper:  addi  a0, gp, 8       -> data_item
# 0x14:          nop
SAMPLE_TEXT = words(0x00000517, 0x01050513, 0x00B50463, 0xFF9FF06F, 0x00818513, NOP)


def _sample(machine=EM_RISCV):
    # .text follows the ELF header and the single program header
    text_addr = BASE + 64 + 56
    symbols = [
        ("_start", text_addr, 1),
        ("helper", text_addr + 0x10, 1),
        ("_gp", text_addr + 0x800, SHN_ABS),
        ("data_item", text_addr + 0x808, SHN_ABS),
    ]
    image, (placed_addr,) = build_elf([(".text", SAMPLE_TEXT)], symbols, machine=machine)
    assert placed_addr == text_addr
    return image, text_addr


@pytest.fixture
def riscv_elf(tmp_path: Path):
    image, text_addr = _sample()
    path = tmp_path / "sample.elf"
    path.write_bytes(image)
    return path, text_addr


@pytest.fixture
def x86_elf(tmp_path: Path):
    image, _ = _sample(machine=EM_X86_64)
    path = tmp_path / "sample-x86.elf"
    path.write_bytes(image)
    return path
