import struct

import pytest

from dxbc.container import build_dxbc, scan_dxbc
from dxbc.sfi0 import FeatureFlag, ShaderFeatureInfo, parse_sfi0


def test_empty_payload_has_no_flags():
    assert parse_sfi0(b"").flags == 0


def test_short_payload_reads_low_word_only():
    info = parse_sfi0(struct.pack("<I", FeatureFlag.ROVS))
    assert info.flags == FeatureFlag.ROVS
    assert info.has(FeatureFlag.ROVS)


def test_high_word_is_shifted():
    info = parse_sfi0(struct.pack("<II", 0, 1))
    assert info.flags == 1 << 32


@pytest.mark.parametrize(
    "flags",
    [0, int(FeatureFlag.DOUBLES), int(FeatureFlag.WAVE_OPS | FeatureFlag.VIEW_ID), (7 << 32) | 3],
)
def test_round_trip(flags):
    info = ShaderFeatureInfo(flags)
    payload = info.to_bytes()
    assert len(payload) == 8
    assert parse_sfi0(payload) == info


def test_wire_bytes_for_doubles():
    assert ShaderFeatureInfo(FeatureFlag.DOUBLES).to_bytes() == b"\x01" + bytes(7)


def test_has():
    info = ShaderFeatureInfo(FeatureFlag.DOUBLES | FeatureFlag.TILED_RESOURCES)
    assert info.has(FeatureFlag.DOUBLES)
    assert info.has(FeatureFlag.TILED_RESOURCES)
    assert not info.has(FeatureFlag.ROVS)


def test_str_none():
    assert str(ShaderFeatureInfo()) == "// Shader Feature Info: (none)\n"


def test_str_lists_flags_in_bit_order():
    info = ShaderFeatureInfo(FeatureFlag.ATOMIC_INT64_ON_DESC_HEAP | FeatureFlag.DOUBLES)
    lines = str(info).splitlines()
    assert lines[0] == f"// Shader Feature Info: 0x{int(info.flags):016X}"
    assert lines[1:] == ["//   Doubles", "//   AtomicInt64OnDescriptorHeap"]


def test_str_names():
    text = str(ShaderFeatureInfo(FeatureFlag.UAVS_64 | FeatureFlag.CS_RAW_STRUCTURED_BUFS))
    assert "//   64UAVs" in text
    assert "//   CS+Raw/StructuredBuffers" in text


def test_to_chunk_in_container():
    info = ShaderFeatureInfo(FeatureFlag.STENCIL_REF)
    chunk = info.to_chunk()
    assert chunk.fourcc == b"SFI0"
    containers = scan_dxbc(build_dxbc([chunk]))
    parsed = containers[0].chunks[0]
    assert parsed.fourcc_str() == "SFI0"
    assert parse_sfi0(parsed.data) == info