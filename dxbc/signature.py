"""Input, output and patch-constant signature chunks (ISGN, OSGN, PCSG, OSG5, ISG1, OSG1, PSG1)."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import Iterable, Union

from .container import WritableChunk

_U32 = struct.Struct("<I")
_BASE = struct.Struct("<5IBB")


class SignatureVersion(enum.Enum):
    """Binary layout variant of a signature chunk."""

    V0 = "v0"  # ISGN / OSGN / PCSG: 24 bytes per element
    V5 = "v5"  # OSG5: 28 bytes per element, leading stream
    V1 = "v1"  # ISG1 / OSG1 / PSG1: 32 bytes, stream and min precision

    @classmethod
    def from_fourcc(cls, fourcc: str | bytes) -> SignatureVersion:
        """Derive the layout from a FourCC."""
        if isinstance(fourcc, (bytes, bytearray)):
            try:
                fourcc = bytes(fourcc).decode("utf-8")
            except UnicodeDecodeError:
                return cls.V0
        if fourcc == "OSG5":
            return cls.V5
        if fourcc in ("ISG1", "OSG1", "PSG1"):
            return cls.V1
        return cls.V0

    def stride(self) -> int:
        """Size in bytes of one element record."""
        return {SignatureVersion.V0: 24, SignatureVersion.V5: 28, SignatureVersion.V1: 32}[self]

    @property
    def has_stream(self) -> bool:
        return self is not SignatureVersion.V0

    @property
    def has_min_precision(self) -> bool:
        return self is SignatureVersion.V1


class MinPrecision(enum.IntEnum):
    """Minimum precision hint (ISG1 / OSG1 / PSG1 only)."""

    DEFAULT = 0
    FLOAT16 = 1
    FLOAT2_8 = 2
    RESERVED = 3
    SINT16 = 4
    UINT16 = 5
    ANY16 = 0xF0
    ANY10 = 0xF1

    def suffix(self) -> str:
        """Text appended to an element line in disassembly."""
        return _MIN_PRECISION_SUFFIXES[self]


_MIN_PRECISION_SUFFIXES = {
    MinPrecision.DEFAULT: "",
    MinPrecision.FLOAT16: " [min16f]",
    MinPrecision.FLOAT2_8: " [min2_8f]",
    MinPrecision.RESERVED: " [reserved]",
    MinPrecision.SINT16: " [min16i]",
    MinPrecision.UINT16: " [min16u]",
    MinPrecision.ANY16: " [any16]",
    MinPrecision.ANY10: " [any10]",
}

# An unrecognised minimum precision is kept as its raw integer value.
MinPrecisionValue = Union[MinPrecision, int]


def _min_precision_from_u32(value: int) -> MinPrecisionValue:
    try:
        return MinPrecision(value)
    except ValueError:
        return value


def _min_precision_suffix(value: MinPrecisionValue) -> str:
    if isinstance(value, MinPrecision):
        return value.suffix()
    return f" [minprec={value}]"


class ComponentType(enum.IntEnum):
    """Component data type of a signature element."""

    UNKNOWN = 0
    UINT = 1
    INT = 2
    FLOAT = 3
    UINT16 = 4
    INT16 = 5
    FLOAT16 = 6
    UINT64 = 7
    INT64 = 8
    FLOAT64 = 9

    def type_name(self) -> str:
        """Lowercase type name used in disassembly output."""
        return self.name.lower()


def _mask_str(mask: int) -> str:
    return "".join(c for bit, c in zip((1, 2, 4, 8), "xyzw") if mask & bit)


@dataclass
class SignatureElement:
    """A parsed input or output signature element."""

    semantic_name: str
    semantic_index: int = 0
    system_value: int = 0
    component_type: int = 0
    register: int = 0
    mask: int = 0
    rw_mask: int = 0
    stream: int | None = None
    min_precision: MinPrecisionValue | None = None

    def component_type_name(self) -> str:
        """The component type name, ``"unknown"`` for unrecognised values."""
        try:
            return ComponentType(self.component_type).type_name()
        except ValueError:
            return "unknown"

    def name_with_index(self) -> str:
        """Semantic name with its index appended when the index is non-zero."""
        if self.semantic_index > 0:
            return f"{self.semantic_name}{self.semantic_index}"
        return self.semantic_name

    def __str__(self) -> str:
        text = (
            f"{self.name_with_index():<24} {self.component_type_name():>7} "
            f"v{self.register}.{_mask_str(self.mask)}"
        )
        if self.stream:
            text += f" stream={self.stream}"
        if self.min_precision is not None:
            text += _min_precision_suffix(self.min_precision)
        return text


@dataclass
class Signature:
    """A signature chunk that keeps its original FourCC for round-tripping."""

    fourcc: bytes
    elements: list[SignatureElement] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        """Serialise the chunk payload."""
        return write_signature(self.fourcc, self.elements).data

    def to_chunk(self) -> WritableChunk:
        """Return a writable chunk under the original FourCC."""
        return write_signature(self.fourcc, self.elements)

    def __str__(self) -> str:
        return "".join(f"{e}\n" for e in self.elements)


def _read_cstring(data: bytes, offset: int) -> str:
    if offset >= len(data):
        return ""
    end = data.find(b"\0", offset)
    if end < 0:
        end = len(data)
    try:
        return data[offset:end].decode("utf-8")
    except UnicodeDecodeError:
        return ""


def parse_signature(fourcc: str | bytes, data: bytes) -> list[SignatureElement]:
    """Parse a signature payload; the FourCC selects the element layout."""
    data = bytes(data)
    if len(data) < 8:
        return []
    version = SignatureVersion.from_fourcc(fourcc)
    stride = version.stride()
    (count,) = _U32.unpack_from(data, 0)

    elements: list[SignatureElement] = []
    for i in range(count):
        pos = 8 + i * stride
        if pos + stride > len(data):
            break
        stream = None
        if version.has_stream:
            (stream,) = _U32.unpack_from(data, pos)
            pos += 4
        name_offset, index, system_value, component_type, register, mask, rw_mask = (
            _BASE.unpack_from(data, pos)
        )
        min_precision = None
        if version.has_min_precision:
            (raw,) = _U32.unpack_from(data, pos + _BASE.size + 2)
            min_precision = _min_precision_from_u32(raw)
        elements.append(
            SignatureElement(
                semantic_name=_read_cstring(data, name_offset),
                semantic_index=index,
                system_value=system_value,
                component_type=component_type,
                register=register,
                mask=mask,
                rw_mask=rw_mask,
                stream=stream,
                min_precision=min_precision,
            )
        )
    return elements


def write_signature(fourcc: bytes | str, elements: Iterable[SignatureElement]) -> WritableChunk:
    """Serialise signature elements into a chunk tagged with ``fourcc``."""
    if isinstance(fourcc, str):
        fourcc = fourcc.encode("utf-8")
    fourcc = bytes(fourcc)
    elements = list(elements)
    version = SignatureVersion.from_fourcc(fourcc)
    table_start = 8 + len(elements) * version.stride()

    table = bytearray()
    offsets: dict[str, int] = {}
    name_offsets = []
    for elem in elements:
        name = elem.semantic_name
        if name not in offsets:
            offsets[name] = table_start + len(table)
            table += name.encode("utf-8") + b"\0"
        name_offsets.append(offsets[name])

    out = bytearray(_U32.pack(len(elements)))
    out += _U32.pack(8)
    for elem, name_offset in zip(elements, name_offsets):
        if version.has_stream:
            out += _U32.pack(elem.stream or 0)
        out += _BASE.pack(
            name_offset,
            elem.semantic_index,
            elem.system_value,
            elem.component_type,
            elem.register,
            elem.mask,
            elem.rw_mask,
        )
        out += bytes(2)
        if version.has_min_precision:
            precision = elem.min_precision if elem.min_precision is not None else 0
            out += _U32.pack(int(precision))
    out += table
    return WritableChunk(fourcc=fourcc, data=bytes(out))