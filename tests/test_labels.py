import pytest

from elfutil import words
from rvelf.container import Region
from rvelf.decode import Instruction, InstType
from rvelf.errors import DecodeError
from rvelf.labels import scan_labels

NOP = 0x00000013
J_MINUS_8 = 0xFF9FF06F
BEQ_A0_A1_8 = 0x00B50463


def test_jump_before_region_start_gets_first_label():
    data = words(J_MINUS_8)
    region = Region(1, ".text", 0, len(data), 0x1000)
    labels = scan_labels([region], data)
    assert labels == {0x1000 - 8: "LOC_000001"}


def test_target_uses_region_load_offset():
    data = bytes(0x40) + words(NOP, BEQ_A0_A1_8)
    region = Region(2, ".text", 0x40, 8, 0x80000000)
    labels = scan_labels([region], data)
    # beq sits at 0x80000004
    assert labels == {0x8000000C: "LOC_000001"}


def test_empty_region_yields_nothing():
    region = Region(1, ".text", 0, 0, 0x1000)
    assert scan_labels([region], b"") == {}


def test_existing_label_is_kept_and_counter_not_advanced():
    # both branches target 0x1008; the jump targets 0x1000
    data = words(BEQ_A0_A1_8, 0x00B50263, J_MINUS_8)
    region = Region(1, ".text", 0, len(data), 0x1000)
    labels = scan_labels([region], data)
    assert labels == {0x1008: "LOC_000001", 0x1000: "LOC_000002"}


def test_scan_is_idempotent():
    data = words(BEQ_A0_A1_8, NOP, J_MINUS_8, NOP)
    regions = [Region(1, ".text", 0, 8, 0x1000), Region(2, ".init", 8, 8, 0x2000)]
    assert scan_labels(regions, data) == scan_labels(regions, data)


def test_global_scope_numbers_across_regions():
    data = words(J_MINUS_8, J_MINUS_8)
    regions = [Region(1, ".text", 0, 4, 0x1000), Region(2, ".init", 4, 4, 0x2000)]
    labels = scan_labels(regions, data)
    assert labels == {0xFF8: "LOC_000001", 0x1FF8: "LOC_000002"}


def test_region_scope_restarts_counter():
    data = words(J_MINUS_8, J_MINUS_8)
    regions = [Region(1, ".text", 0, 4, 0x1000), Region(2, ".init", 4, 4, 0x2000)]
    labels = scan_labels(regions, data, scope="region")
    assert labels == {0xFF8: "LOC_000001", 0x1FF8: "LOC_000001"}


def test_custom_label_format():
    data = words(J_MINUS_8)
    labels = scan_labels([Region(1, ".text", 0, 4, 0x1000)], data, label_format=".L{}")
    assert labels == {0xFF8: ".L1"}


def test_unknown_scope_is_rejected():
    with pytest.raises(ValueError):
        scan_labels([], b"", scope="file")


def test_stalled_decoder_is_fatal():
    def stuck(data, pos, xlen, end):
        return Instruction(0, 0, InstType.JUMP, imm=4), pos

    with pytest.raises(DecodeError):
        scan_labels([Region(1, ".text", 0, 4, 0x1000)], words(NOP), decoder=stuck)


def test_fake_decoder_targets_follow_formula():
    def fake(data, pos, xlen, end):
        return Instruction(0, 2, InstType.BRANCH, "beq", imm=-pos), pos + 2

    region = Region(1, ".text", 0x10, 6, 0x400)
    labels = scan_labels([region], bytes(0x20), decoder=fake)
    # (pos - load_offset) + imm == address - pos == 0x400 - 0x10 for every step
    assert labels == {0x3F0: "LOC_000001"}
