import pytest

from npcdbg.memory import MBASE, Memory


@pytest.fixture
def mem():
    return Memory(MBASE, 4096)


def test_word_round_trip(mem):
    mem.write(MBASE + 8, 4, 0xDEADBEEF)
    assert mem.read(MBASE + 8, 4) == 0xDEADBEEF


def test_little_endian_layout(mem):
    mem.write(MBASE, 4, 0x12345678)
    assert mem.read(MBASE, 1) == 0x78
    assert mem.read(MBASE, 2) == 0x5678


def test_write_truncates_to_length(mem):
    mem.write(MBASE, 1, 0x1FF)
    assert mem.read(MBASE, 1) == 0xFF
    assert mem.read(MBASE + 1, 1) == 0


def test_in_pmem_bounds(mem):
    assert mem.in_pmem(MBASE)
    assert mem.in_pmem(MBASE + 4095)
    assert not mem.in_pmem(MBASE + 4096)
    assert not mem.in_pmem(MBASE - 1)


def test_out_of_bounds_read_is_zero_and_write_ignored(mem):
    mem.write(MBASE + 4096, 4, 0xFFFFFFFF)
    assert mem.read(MBASE + 4096, 4) == 0
    assert mem.read(0, 4) == 0


@pytest.mark.parametrize("length", [0, 3, 8])
def test_bad_length_raises(mem, length):
    with pytest.raises(ValueError):
        mem.read(MBASE, length)
    with pytest.raises(ValueError):
        mem.write(MBASE, length, 1)


def test_reset_clears(mem):
    mem.write(MBASE + 16, 4, 0xCAFEBABE)
    mem.reset()
    assert mem.read(MBASE + 16, 4) == 0


def test_load_image_places_bytes_at_reset_vector(mem, tmp_path):
    image = tmp_path / "prog.bin"
    payload = bytes([0x13, 0x00, 0x00, 0x00, 0x73, 0x00, 0x10, 0x00])
    image.write_bytes(payload)
    assert mem.load_image(image) == len(payload)
    assert mem.reset_vector == MBASE
    assert mem.read(MBASE, 4) == int.from_bytes(payload[:4], "little")
    assert mem.read(MBASE + 4, 4) == int.from_bytes(payload[4:], "little")


def test_load_image_too_large(tmp_path):
    small = Memory(MBASE, 4)
    image = tmp_path / "big.bin"
    image.write_bytes(bytes(8))
    with pytest.raises(ValueError):
        small.load_image(image)


def test_load_image_missing_file(mem, tmp_path):
    with pytest.raises(OSError):
        mem.load_image(tmp_path / "missing.bin")