"""RTS0 chunk: serialized D3D12 root signature."""

from __future__ import annotations

import enum
import math
import struct
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Union

from .container import WritableChunk

_HEADER = struct.Struct("<6I")
_U32 = struct.Struct("<I")
_PAIR = struct.Struct("<II")
_TRIPLE = struct.Struct("<III")
_RANGE = struct.Struct("<5I")
_SAMPLER = struct.Struct("<4If3I2f3I")
_F32 = struct.Struct("<f")

_UNBOUNDED = 0xFFFF_FFFF


class ShaderVisibility(enum.IntEnum):
    """Which shader stage(s) a root parameter or static sampler is visible to."""

    ALL = 0
    VERTEX = 1
    HULL = 2
    DOMAIN = 3
    GEOMETRY = 4
    PIXEL = 5

    def __str__(self) -> str:
        return _VIS_NAMES[self]


_VIS_NAMES = {
    ShaderVisibility.ALL: "ALL",
    ShaderVisibility.VERTEX: "VS",
    ShaderVisibility.HULL: "HS",
    ShaderVisibility.DOMAIN: "DS",
    ShaderVisibility.GEOMETRY: "GS",
    ShaderVisibility.PIXEL: "PS",
}


class DescriptorRangeType(enum.IntEnum):
    """Descriptor range type."""

    SRV = 0
    UAV = 1
    CBV = 2
    SAMPLER = 3

    def __str__(self) -> str:
        return self.name

    def prefix(self) -> str:
        """Return the HLSL register prefix character for this range type."""
        return _RANGE_PREFIXES[self]


_RANGE_PREFIXES = {
    DescriptorRangeType.SRV: "t",
    DescriptorRangeType.UAV: "u",
    DescriptorRangeType.CBV: "b",
    DescriptorRangeType.SAMPLER: "s",
}


def _parse_vis(value: int) -> ShaderVisibility:
    try:
        return ShaderVisibility(value)
    except ValueError:
        return ShaderVisibility.ALL


def _parse_range_type(value: int) -> DescriptorRangeType:
    try:
        return DescriptorRangeType(value)
    except ValueError:
        return DescriptorRangeType.SRV


def _to_f32(value: float) -> float:
    return _F32.unpack(_F32.pack(value))[0]


def _fmt_f32(value: float) -> str:
    """Format a single-precision float as its shortest decimal, never in exponent form."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    target = _to_f32(value)
    text = f"{target:.9g}"
    for precision in range(1, 10):
        candidate = f"{target:.{precision}g}"
        if _to_f32(float(candidate)) == target:
            text = candidate
            break
    return format(Decimal(text), "f")


@dataclass
class DescriptorRange:
    """A descriptor range within a descriptor table."""

    range_type: DescriptorRangeType
    num_descriptors: int
    base_shader_register: int
    register_space: int
    offset_in_descriptors_from_table_start: int

    def _body(self) -> str:
        count = (
            "unbounded" if self.num_descriptors == _UNBOUNDED else str(self.num_descriptors)
        )
        offset = (
            "APPEND"
            if self.offset_in_descriptors_from_table_start == _UNBOUNDED
            else str(self.offset_in_descriptors_from_table_start)
        )
        return (
            f"{self.range_type}({count}) {self.range_type.prefix()}"
            f"{self.base_shader_register} space={self.register_space} offset={offset}"
        )

    def __str__(self) -> str:
        return self._body()


@dataclass
class DescriptorTable:
    """A descriptor table holding one or more descriptor ranges."""

    ranges: list[DescriptorRange] = field(default_factory=list)


@dataclass
class Constants32Bit:
    """Inline 32-bit root constants."""

    register: int
    space: int
    num_values: int


@dataclass
class RootCbv:
    """Inline CBV root descriptor."""

    register: int
    space: int


@dataclass
class RootSrv:
    """Inline SRV root descriptor."""

    register: int
    space: int


@dataclass
class RootUav:
    """Inline UAV root descriptor."""

    register: int
    space: int


RootParameterType = Union[DescriptorTable, Constants32Bit, RootCbv, RootSrv, RootUav]

_PARAM_CODES = {
    DescriptorTable: 0,
    Constants32Bit: 1,
    RootCbv: 2,
    RootSrv: 3,
    RootUav: 4,
}

_DESCRIPTOR_KINDS = {RootCbv: ("CBV", "b"), RootSrv: ("SRV", "t"), RootUav: ("UAV", "u")}


@dataclass
class RootParameter:
    """A single root parameter entry."""

    param_type: RootParameterType
    visibility: ShaderVisibility = ShaderVisibility.ALL

    def __str__(self) -> str:
        p = self.param_type
        vis = self.visibility
        if isinstance(p, DescriptorTable):
            return f"DescriptorTable vis={vis}" + "".join(f"\n  {r}" for r in p.ranges)
        if isinstance(p, Constants32Bit):
            return (
                f"32BitConstants vis={vis} b{p.register} space={p.space} "
                f"num32BitValues={p.num_values}"
            )
        name, prefix = _DESCRIPTOR_KINDS[type(p)]
        return f"{name} vis={vis} {prefix}{p.register} space={p.space}"

    def _payload_size(self) -> int:
        p = self.param_type
        if isinstance(p, DescriptorTable):
            return 8 + len(p.ranges) * 20
        if isinstance(p, Constants32Bit):
            return 12
        return 8


@dataclass
class StaticSampler:
    """A static sampler baked into the root signature."""

    filter: int = 0
    address_u: int = 0
    address_v: int = 0
    address_w: int = 0
    mip_lod_bias: float = 0.0
    max_anisotropy: int = 0
    comparison_func: int = 0
    border_color: int = 0
    min_lod: float = 0.0
    max_lod: float = 0.0
    shader_register: int = 0
    register_space: int = 0
    visibility: ShaderVisibility = ShaderVisibility.ALL

    def _body(self) -> str:
        return (
            f"s{self.shader_register} space={self.register_space} vis={self.visibility} "
            f"filter={self.filter} addr=({self.address_u},{self.address_v},{self.address_w}) "
            f"lod=[{_fmt_f32(self.min_lod)},{_fmt_f32(self.max_lod)}]"
        )

    def __str__(self) -> str:
        return f"StaticSampler {self._body()}"


@dataclass
class RootSignature:
    """Parsed RTS0 (root signature) chunk."""

    version: int = 1
    flags: int = 0
    parameters: list[RootParameter] = field(default_factory=list)
    static_samplers: list[StaticSampler] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        """Serialise the chunk payload."""
        params_offset = _HEADER.size
        offset = params_offset + len(self.parameters) * 12
        payload_offsets = []
        for p in self.parameters:
            payload_offsets.append(offset)
            offset += p._payload_size()
        samplers_offset = offset

        out = bytearray(
            _HEADER.pack(
                self.version,
                len(self.parameters),
                params_offset,
                len(self.static_samplers),
                samplers_offset,
                self.flags,
            )
        )

        for p, payload_offset in zip(self.parameters, payload_offsets):
            out += _TRIPLE.pack(_PARAM_CODES[type(p.param_type)], int(p.visibility), payload_offset)

        for p in self.parameters:
            payload = p.param_type
            if isinstance(payload, DescriptorTable):
                out += _U32.pack(len(payload.ranges))
                out += _U32.pack(len(out) + 4)
                for r in payload.ranges:
                    out += _RANGE.pack(
                        int(r.range_type),
                        r.num_descriptors,
                        r.base_shader_register,
                        r.register_space,
                        r.offset_in_descriptors_from_table_start,
                    )
            elif isinstance(payload, Constants32Bit):
                out += _TRIPLE.pack(payload.register, payload.space, payload.num_values)
            else:
                out += _PAIR.pack(payload.register, payload.space)

        for s in self.static_samplers:
            out += _SAMPLER.pack(
                s.filter,
                s.address_u,
                s.address_v,
                s.address_w,
                s.mip_lod_bias,
                s.max_anisotropy,
                s.comparison_func,
                s.border_color,
                s.min_lod,
                s.max_lod,
                s.shader_register,
                s.register_space,
                int(s.visibility),
            )

        return bytes(out)

    def to_chunk(self) -> WritableChunk:
        """Return a writable ``RTS0`` chunk."""
        return WritableChunk(fourcc=b"RTS0", data=self.to_bytes())

    def __str__(self) -> str:
        lines = [
            f"// Root Signature v1.{'1' if self.version >= 2 else '0'} \u2014 "
            f"{len(self.parameters)} parameter(s), {len(self.static_samplers)} "
            f"static sampler(s), flags=0x{self.flags:X}"
        ]
        for i, p in enumerate(self.parameters):
            payload = p.param_type
            vis = p.visibility
            if isinstance(payload, DescriptorTable):
                lines.append(f"//   [{i:2d}] DescriptorTable  vis={vis}")
                lines.extend(f"//        {r._body()}" for r in payload.ranges)
            elif isinstance(payload, Constants32Bit):
                lines.append(
                    f"//   [{i:2d}] 32BitConstants   vis={vis}  b{payload.register} "
                    f"space={payload.space} num32BitValues={payload.num_values}"
                )
            else:
                name, prefix = _DESCRIPTOR_KINDS[type(payload)]
                lines.append(
                    f"//   [{i:2d}] {name:<16} vis={vis}  {prefix}{payload.register} "
                    f"space={payload.space}"
                )
        lines.extend(
            f"//   StaticSampler[{i}] {s._body()}" for i, s in enumerate(self.static_samplers)
        )
        return "\n".join(lines) + "\n"


def _unpack(layout: struct.Struct, data: bytes, pos: int) -> tuple:
    try:
        return layout.unpack_from(data, pos)
    except struct.error as exc:
        raise ValueError(f"RTS0 data truncated at offset {pos}") from exc


def _parse_parameter_type(code: int, data: bytes, payload_offset: int) -> RootParameterType:
    if code == 0:
        count, ranges_offset = _unpack(_PAIR, data, payload_offset)
        ranges = []
        for j in range(count):
            pos = ranges_offset + j * 20
            if pos + 20 > len(data):
                break
            rt, num, base, space, table_offset = _unpack(_RANGE, data, pos)
            ranges.append(
                DescriptorRange(_parse_range_type(rt), num, base, space, table_offset)
            )
        return DescriptorTable(ranges)
    if code == 1:
        return Constants32Bit(*_unpack(_TRIPLE, data, payload_offset))
    register, space = _unpack(_PAIR, data, payload_offset)
    if code == 2:
        return RootCbv(register, space)
    if code == 3:
        return RootSrv(register, space)
    return RootUav(register, space)


def parse_rts0(data: bytes) -> RootSignature:
    """Parse an RTS0 payload (the bytes after the chunk header).

    Raises ValueError if the data is too short or a referenced field lies past its end.
    """
    data = bytes(data)
    if len(data) < _HEADER.size:
        raise ValueError(f"RTS0 chunk too short: {len(data)} bytes (minimum 24)")
    version, num_params, params_offset, num_samplers, samplers_offset, flags = (
        _HEADER.unpack_from(data, 0)
    )

    parameters = []
    for i in range(num_params):
        pos = params_offset + i * 12
        if pos + 12 > len(data):
            break
        code, vis, payload_offset = _unpack(_TRIPLE, data, pos)
        parameters.append(
            RootParameter(_parse_parameter_type(code, data, payload_offset), _parse_vis(vis))
        )

    samplers = []
    for i in range(num_samplers):
        pos = samplers_offset + i * _SAMPLER.size
        if pos + _SAMPLER.size > len(data):
            break
        fields = _unpack(_SAMPLER, data, pos)
        samplers.append(StaticSampler(*fields[:12], visibility=_parse_vis(fields[12])))

    return RootSignature(
        version=version, flags=flags, parameters=parameters, static_samplers=samplers
    )