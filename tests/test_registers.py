import pytest

from npcdbg.registers import REG_NAMES, RegisterFile, UnknownRegisterError


@pytest.fixture
def regs():
    rf = RegisterFile()
    rf.load(range(16))
    return rf


def test_get_by_name(regs):
    assert regs.get("$0") == 0
    assert regs.get("sp") == 2
    assert regs.get("a5") == 15


def test_unknown_register_raises(regs):
    with pytest.raises(UnknownRegisterError):
        regs.get("x99")
    with pytest.raises(UnknownRegisterError):
        regs.format_reg("pc")


def test_load_wrong_count_raises(regs):
    with pytest.raises(ValueError):
        regs.load([1, 2, 3])


def test_load_masks_to_32_bits():
    rf = RegisterFile()
    rf.load([0x1_0000_0005] + [0] * 15)
    assert rf.get("$0") == 5


def test_snapshot_and_matches(regs):
    snap = regs.snapshot()
    assert snap == tuple(range(16))
    assert regs.matches(list(range(16)))
    changed = list(range(16))
    changed[3] = 99
    assert not regs.matches(changed)


def test_format_reg(regs):
    regs.load([0] * 2 + [0x10] + [0] * 13)
    assert regs.format_reg("sp") == "sp 0x00000010"


def test_format_layout(regs):
    text = regs.format(0x80000000)
    lines = text.split("\n")
    assert lines[0] == "npc_regs"
    assert len(lines) == 7
    assert lines[1].startswith("$0  0x00000000 ra  0x00000001 ")
    assert lines[5] == "0x80000000"
    assert lines[6] == ""
    for name in REG_NAMES:
        assert name in text