import struct

import pytest

from dxbc.container import build_dxbc, scan_dxbc
from dxbc.rts0 import (
    Constants32Bit,
    DescriptorRange,
    DescriptorRangeType,
    DescriptorTable,
    RootCbv,
    RootParameter,
    RootSignature,
    RootSrv,
    RootUav,
    ShaderVisibility,
    StaticSampler,
    parse_rts0,
)


def _sample_signature() -> RootSignature:
    table = DescriptorTable(
        [
            DescriptorRange(DescriptorRangeType.SRV, 4, 0, 0, 0),
            DescriptorRange(DescriptorRangeType.SAMPLER, 0xFFFFFFFF, 1, 2, 0xFFFFFFFF),
        ]
    )
    return RootSignature(
        version=2,
        flags=0x1,
        parameters=[
            RootParameter(table, ShaderVisibility.PIXEL),
            RootParameter(Constants32Bit(0, 0, 4), ShaderVisibility.VERTEX),
            RootParameter(RootCbv(3, 1), ShaderVisibility.ALL),
            RootParameter(RootSrv(2, 1), ShaderVisibility.HULL),
            RootParameter(RootUav(5, 0), ShaderVisibility.DOMAIN),
        ],
        static_samplers=[
            StaticSampler(
                filter=21,
                address_u=1,
                address_v=1,
                address_w=3,
                mip_lod_bias=0.5,
                max_anisotropy=16,
                comparison_func=4,
                border_color=2,
                min_lod=0.0,
                max_lod=1000.0,
                shader_register=0,
                register_space=0,
                visibility=ShaderVisibility.PIXEL,
            )
        ],
    )


def test_round_trip():
    sig = _sample_signature()
    assert parse_rts0(sig.to_bytes()) == sig


def test_empty_signature_round_trip():
    sig = RootSignature(version=1, flags=0)
    data = sig.to_bytes()
    assert len(data) == 24
    assert parse_rts0(data) == sig


def test_header_layout():
    sig = _sample_signature()
    data = sig.to_bytes()
    version, np_, p_off, ns, s_off, flags = struct.unpack_from("<6I", data, 0)
    assert (version, np_, p_off, ns, flags) == (2, 5, 24, 1, 1)
    assert s_off == len(data) - 52


def test_to_chunk_and_container_round_trip():
    sig = _sample_signature()
    chunk = sig.to_chunk()
    assert chunk.fourcc == b"RTS0"
    assert chunk.data == sig.to_bytes()
    containers = scan_dxbc(build_dxbc([chunk]))
    assert containers[0].chunks[0].fourcc_str() == "RTS0"
    assert parse_rts0(containers[0].chunks[0].data) == sig


def test_too_short_raises():
    with pytest.raises(ValueError):
        parse_rts0(b"\x00" * 23)


def test_payload_offset_past_end_raises():
    header = struct.pack("<6I", 1, 1, 24, 0, 0, 0)
    entry = struct.pack("<III", 2, 0, 1000)
    with pytest.raises(ValueError):
        parse_rts0(header + entry)


def test_parameter_count_truncated_to_available_entries():
    sig = RootSignature(parameters=[RootParameter(RootCbv(1, 0))])
    data = bytearray(sig.to_bytes())
    struct.pack_into("<I", data, 4, 50)
    parsed = parse_rts0(bytes(data))
    assert len(parsed.parameters) < 50
    assert parsed.parameters[0] == RootParameter(RootCbv(1, 0))


def test_unknown_codes_use_defaults():
    header = struct.pack("<6I", 1, 2, 24, 0, 0, 0)
    entries = struct.pack("<III", 7, 9, 48) + struct.pack("<III", 0, 1, 56)
    uav_payload = struct.pack("<II", 4, 2)
    table_payload = struct.pack("<II", 1, 64) + struct.pack("<5I", 9, 1, 0, 0, 0)
    sig = parse_rts0(header + entries + uav_payload + table_payload)
    first, second = sig.parameters
    assert first == RootParameter(RootUav(4, 2), ShaderVisibility.ALL)
    assert second.visibility is ShaderVisibility.VERTEX
    assert second.param_type.ranges[0].range_type is DescriptorRangeType.SRV


@pytest.mark.parametrize(
    "vis, text",
    [
        (ShaderVisibility.ALL, "ALL"),
        (ShaderVisibility.VERTEX, "VS"),
        (ShaderVisibility.HULL, "HS"),
        (ShaderVisibility.DOMAIN, "DS"),
        (ShaderVisibility.GEOMETRY, "GS"),
        (ShaderVisibility.PIXEL, "PS"),
    ],
)
def test_visibility_str(vis, text):
    assert str(vis) == text


@pytest.mark.parametrize(
    "rt, text, prefix",
    [
        (DescriptorRangeType.SRV, "SRV", "t"),
        (DescriptorRangeType.UAV, "UAV", "u"),
        (DescriptorRangeType.CBV, "CBV", "b"),
        (DescriptorRangeType.SAMPLER, "SAMPLER", "s"),
    ],
)
def test_range_type_str_and_prefix(rt, text, prefix):
    assert str(rt) == text
    assert rt.prefix() == prefix


def test_descriptor_range_str_unbounded_append():
    r = DescriptorRange(DescriptorRangeType.SAMPLER, 0xFFFFFFFF, 1, 2, 0xFFFFFFFF)
    assert str(r) == "SAMPLER(unbounded) s1 space=2 offset=APPEND"


def test_root_parameter_cbv_str():
    p = RootParameter(RootCbv(3, 1), ShaderVisibility.PIXEL)
    assert str(p) == "CBV vis=PS b3 space=1"


def test_descriptor_table_str_lists_ranges():
    p = _sample_signature().parameters[0]
    lines = str(p).split("\n")
    assert lines[0].startswith("DescriptorTable vis=PS")
    assert len(lines) == 3
    assert all(line.startswith("  ") for line in lines[1:])


def test_static_sampler_str_formats_lod():
    s = _sample_signature().static_samplers[0]
    text = str(s)
    assert text.startswith("StaticSampler s0")
    assert "lod=[0,1000]" in text


def test_signature_str_structure():
    sig = _sample_signature()
    text = str(sig)
    lines = text.splitlines()
    assert text.endswith("\n")
    assert lines[0].startswith("// Root Signature v1.1")
    assert "flags=0x1" in lines[0]
    # header + 5 params + 2 ranges + 1 sampler
    assert len(lines) == 9
    assert "StaticSampler[0]" in lines[-1]


def test_signature_str_version_one():
    text = str(RootSignature(version=1))
    assert text.startswith("// Root Signature v1.0")
    assert len(text.splitlines()) == 1