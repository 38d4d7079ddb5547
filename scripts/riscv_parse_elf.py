#!/usr/bin/env python3
"""Print ELF headers, symbols and a labelled RISC-V disassembly.

Usage:
    python scripts/riscv_parse_elf.py [-c] [-e] [-s] [-p] [-t] [-d | -a] <elf_file>
"""
from rvelf.cli import main

if __name__ == '__main__':
    main()
