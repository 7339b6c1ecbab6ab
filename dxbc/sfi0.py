"""SFI0 chunk: shader feature info flags."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from .container import WritableChunk


class FeatureFlag(enum.IntFlag):
    """Optional GPU features a shader may require."""

    DOUBLES = 0x0001
    CS_RAW_STRUCTURED_BUFS = 0x0002
    UAVS_AT_EVERY_STAGE = 0x0004
    UAVS_64 = 0x0008
    MINIMUM_PRECISION = 0x0010
    DOUBLE_EXTENSIONS_11_1 = 0x0020
    SHADER_EXTENSIONS_11_1 = 0x0040
    LEVEL_9_COMPARISON_FILTERING = 0x0080
    TILED_RESOURCES = 0x0100
    STENCIL_REF = 0x0200
    INNER_COVERAGE = 0x0400
    TYPED_UAV_LOAD_ADDITIONAL_FORMATS = 0x0800
    ROVS = 0x1000
    VP_RT_ARRAY_INDEX_ANY_SHADER = 0x2000
    WAVE_OPS = 0x4000
    INT64_OPS = 0x8000
    VIEW_ID = 0x0001_0000
    BARYCENTRICS = 0x0002_0000
    NATIVE_LOW_PRECISION = 0x0004_0000
    SHADING_RATE = 0x0008_0000
    RAYTRACING_TIER_1_1 = 0x0010_0000
    SAMPLER_FEEDBACK = 0x0020_0000
    ATOMIC_INT64_ON_TYPED_RESOURCE = 0x0040_0000
    ATOMIC_INT64_ON_GROUP_SHARED = 0x0080_0000
    DERIVS_IN_MESH_AMP_SHADERS = 0x0100_0000
    RESOURCE_DESC_HEAP_INDEXING = 0x0200_0000
    SAMPLER_DESC_HEAP_INDEXING = 0x0400_0000
    ATOMIC_INT64_ON_DESC_HEAP = 0x0800_0000


_FLAG_NAMES: tuple[tuple[FeatureFlag, str], ...] = (
    (FeatureFlag.DOUBLES, "Doubles"),
    (FeatureFlag.CS_RAW_STRUCTURED_BUFS, "CS+Raw/StructuredBuffers"),
    (FeatureFlag.UAVS_AT_EVERY_STAGE, "UAVsAtEveryStage"),
    (FeatureFlag.UAVS_64, "64UAVs"),
    (FeatureFlag.MINIMUM_PRECISION, "MinimumPrecision"),
    (FeatureFlag.DOUBLE_EXTENSIONS_11_1, "11.1DoubleExtensions"),
    (FeatureFlag.SHADER_EXTENSIONS_11_1, "11.1ShaderExtensions"),
    (FeatureFlag.LEVEL_9_COMPARISON_FILTERING, "Level9ComparisonFiltering"),
    (FeatureFlag.TILED_RESOURCES, "TiledResources"),
    (FeatureFlag.STENCIL_REF, "StencilRef"),
    (FeatureFlag.INNER_COVERAGE, "InnerCoverage"),
    (FeatureFlag.TYPED_UAV_LOAD_ADDITIONAL_FORMATS, "TypedUAVLoadAdditionalFormats"),
    (FeatureFlag.ROVS, "ROVs"),
    (FeatureFlag.VP_RT_ARRAY_INDEX_ANY_SHADER, "VPAndRTArrayIndexFromAnyShader"),
    (FeatureFlag.WAVE_OPS, "WaveOps"),
    (FeatureFlag.INT64_OPS, "Int64Ops"),
    (FeatureFlag.VIEW_ID, "ViewID"),
    (FeatureFlag.BARYCENTRICS, "Barycentrics"),
    (FeatureFlag.NATIVE_LOW_PRECISION, "NativeLowPrecision"),
    (FeatureFlag.SHADING_RATE, "ShadingRate"),
    (FeatureFlag.RAYTRACING_TIER_1_1, "RaytracingTier1_1"),
    (FeatureFlag.SAMPLER_FEEDBACK, "SamplerFeedback"),
    (FeatureFlag.ATOMIC_INT64_ON_TYPED_RESOURCE, "AtomicInt64OnTypedResource"),
    (FeatureFlag.ATOMIC_INT64_ON_GROUP_SHARED, "AtomicInt64OnGroupShared"),
    (FeatureFlag.DERIVS_IN_MESH_AMP_SHADERS, "DerivativesInMeshAndAmpShaders"),
    (FeatureFlag.RESOURCE_DESC_HEAP_INDEXING, "ResourceDescriptorHeapIndexing"),
    (FeatureFlag.SAMPLER_DESC_HEAP_INDEXING, "SamplerDescriptorHeapIndexing"),
    (FeatureFlag.ATOMIC_INT64_ON_DESC_HEAP, "AtomicInt64OnDescriptorHeap"),
)

_MASK_32 = 0xFFFF_FFFF


@dataclass
class ShaderFeatureInfo:
    """Parsed SFI0 chunk: two little-endian u32 words packed into one 64-bit value."""

    flags: int = 0

    def has(self, flag: int) -> bool:
        """Return True if any bit of ``flag`` is set."""
        return self.flags & int(flag) != 0

    def to_bytes(self) -> bytes:
        """Serialise the chunk payload."""
        return struct.pack("<II", self.flags & _MASK_32, (self.flags >> 32) & _MASK_32)

    def to_chunk(self) -> WritableChunk:
        """Return a writable ``SFI0`` chunk."""
        return WritableChunk(fourcc=b"SFI0", data=self.to_bytes())

    def __str__(self) -> str:
        if self.flags == 0:
            return "// Shader Feature Info: (none)\n"
        lines = [f"// Shader Feature Info: 0x{self.flags:016X}"]
        lines.extend(f"//   {name}" for bit, name in _FLAG_NAMES if self.flags & bit)
        return "\n".join(lines) + "\n"


def parse_sfi0(data: bytes) -> ShaderFeatureInfo:
    """Parse an SFI0 payload; missing words read as zero."""
    lo = struct.unpack_from("<I", data, 0)[0] if len(data) >= 4 else 0
    hi = struct.unpack_from("<I", data, 4)[0] if len(data) >= 8 else 0
    return ShaderFeatureInfo(flags=lo | (hi << 32))