"""STAT chunk: shader statistics."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .container import WritableChunk

_BASE_COUNTS = struct.Struct("<22I")
_GS_FIELDS = struct.Struct("<3I")
_EXTENDED = struct.Struct("<8I")
_U32 = struct.Struct("<I")

_MIN_SIZE = 116
_BASE_SIZE = 120
_EXTENDED_SIZE = 152
_GS_OFFSET = 96
_SAMPLE_FREQUENCY_OFFSET = 116


@dataclass
class ShaderStats:
    """Shader statistics from a STAT chunk.

    The fields after ``is_sample_frequency`` are only present in chunks of
    at least 152 bytes; missing fields are zero. ``raw_size`` keeps the
    original payload size so that writing emits the same number of bytes.
    """

    instruction_count: int = 0
    temp_register_count: int = 0
    define_count: int = 0
    declaration_count: int = 0
    float_instruction_count: int = 0
    int_instruction_count: int = 0
    uint_instruction_count: int = 0
    static_flow_control_count: int = 0
    dynamic_flow_control_count: int = 0
    macro_instruction_count: int = 0
    temp_array_count: int = 0
    array_instruction_count: int = 0
    cut_instruction_count: int = 0
    emit_instruction_count: int = 0
    texture_normal_instructions: int = 0
    texture_load_instructions: int = 0
    texture_comp_instructions: int = 0
    texture_bias_instructions: int = 0
    texture_gradient_instructions: int = 0
    mov_instruction_count: int = 0
    movc_instruction_count: int = 0
    conversion_instruction_count: int = 0
    gs_input_primitive: int = 0
    gs_output_topology: int = 0
    gs_max_output_vertex_count: int = 0
    is_sample_frequency: bool = False
    gs_instance_count: int = 0
    hs_control_points: int = 0
    hs_output_primitive: int = 0
    hs_partitioning: int = 0
    ds_tessellator_domain: int = 0
    barrier_instructions: int = 0
    interlocked_instructions: int = 0
    texture_store_instructions: int = 0
    raw_size: int = 0

    def _base_counts(self) -> tuple[int, ...]:
        return (
            self.instruction_count,
            self.temp_register_count,
            self.define_count,
            self.declaration_count,
            self.float_instruction_count,
            self.int_instruction_count,
            self.uint_instruction_count,
            self.static_flow_control_count,
            self.dynamic_flow_control_count,
            self.macro_instruction_count,
            self.temp_array_count,
            self.array_instruction_count,
            self.cut_instruction_count,
            self.emit_instruction_count,
            self.texture_normal_instructions,
            self.texture_load_instructions,
            self.texture_comp_instructions,
            self.texture_bias_instructions,
            self.texture_gradient_instructions,
            self.mov_instruction_count,
            self.movc_instruction_count,
            self.conversion_instruction_count,
        )

    def to_bytes(self) -> bytes:
        """Serialise the chunk payload, padded or cut to the original size."""
        target_size = self.raw_size if self.raw_size > 0 else _BASE_SIZE
        out = bytearray(_BASE_COUNTS.pack(*self._base_counts()))
        out += bytes(8)  # two unknown fields at offsets 88 and 92
        out += _GS_FIELDS.pack(
            self.gs_input_primitive,
            self.gs_output_topology,
            self.gs_max_output_vertex_count,
        )
        out += bytes(8)  # two unknown fields at offsets 108 and 112
        out += _U32.pack(int(bool(self.is_sample_frequency)))
        if target_size >= _EXTENDED_SIZE:
            out += _EXTENDED.pack(
                self.gs_instance_count,
                self.hs_control_points,
                self.hs_output_primitive,
                self.hs_partitioning,
                self.ds_tessellator_domain,
                self.barrier_instructions,
                self.interlocked_instructions,
                self.texture_store_instructions,
            )
        if len(out) < target_size:
            out += bytes(target_size - len(out))
        return bytes(out[:target_size])

    def to_chunk(self) -> WritableChunk:
        """Return a writable ``STAT`` chunk."""
        return WritableChunk(fourcc=b"STAT", data=self.to_bytes())

    def __str__(self) -> str:
        lines = [
            "// Statistics:",
            f"//   {self.instruction_count} instruction(s)",
            f"//   {self.temp_register_count} temp register(s)",
        ]
        optional = (
            (self.declaration_count, "declaration(s)"),
            (self.float_instruction_count, "float instruction(s)"),
            (self.int_instruction_count, "int instruction(s)"),
            (self.uint_instruction_count, "uint instruction(s)"),
            (self.texture_normal_instructions, "texture normal instruction(s)"),
            (self.texture_load_instructions, "texture load instruction(s)"),
            (self.static_flow_control_count, "static flow control(s)"),
            (self.dynamic_flow_control_count, "dynamic flow control(s)"),
            (self.cut_instruction_count, "cut instruction(s)"),
            (self.emit_instruction_count, "emit instruction(s)"),
        )
        lines.extend(f"//   {count} {label}" for count, label in optional if count > 0)
        if self.is_sample_frequency:
            lines.append("//   sample-frequency execution")
        return "\n".join(lines) + "\n"


def parse_stat(data: bytes) -> ShaderStats:
    """Parse a STAT payload.

    Raises ValueError if the data is shorter than 116 bytes.
    """
    data = bytes(data)
    if len(data) < _MIN_SIZE:
        raise ValueError(f"STAT chunk too short: {len(data)} bytes (minimum {_MIN_SIZE})")

    (
        instruction_count,
        temp_register_count,
        define_count,
        declaration_count,
        float_instruction_count,
        int_instruction_count,
        uint_instruction_count,
        static_flow_control_count,
        dynamic_flow_control_count,
        macro_instruction_count,
        temp_array_count,
        array_instruction_count,
        cut_instruction_count,
        emit_instruction_count,
        texture_normal_instructions,
        texture_load_instructions,
        texture_comp_instructions,
        texture_bias_instructions,
        texture_gradient_instructions,
        mov_instruction_count,
        movc_instruction_count,
        conversion_instruction_count,
    ) = _BASE_COUNTS.unpack_from(data, 0)
    gs_input, gs_output, gs_max_vertices = _GS_FIELDS.unpack_from(data, _GS_OFFSET)

    is_sample_frequency = False
    if len(data) >= _BASE_SIZE:
        is_sample_frequency = _U32.unpack_from(data, _SAMPLE_FREQUENCY_OFFSET)[0] != 0

    stats = ShaderStats(
        instruction_count=instruction_count,
        temp_register_count=temp_register_count,
        define_count=define_count,
        declaration_count=declaration_count,
        float_instruction_count=float_instruction_count,
        int_instruction_count=int_instruction_count,
        uint_instruction_count=uint_instruction_count,
        static_flow_control_count=static_flow_control_count,
        dynamic_flow_control_count=dynamic_flow_control_count,
        macro_instruction_count=macro_instruction_count,
        temp_array_count=temp_array_count,
        array_instruction_count=array_instruction_count,
        cut_instruction_count=cut_instruction_count,
        emit_instruction_count=emit_instruction_count,
        texture_normal_instructions=texture_normal_instructions,
        texture_load_instructions=texture_load_instructions,
        texture_comp_instructions=texture_comp_instructions,
        texture_bias_instructions=texture_bias_instructions,
        texture_gradient_instructions=texture_gradient_instructions,
        mov_instruction_count=mov_instruction_count,
        movc_instruction_count=movc_instruction_count,
        conversion_instruction_count=conversion_instruction_count,
        gs_input_primitive=gs_input,
        gs_output_topology=gs_output,
        gs_max_output_vertex_count=gs_max_vertices,
        is_sample_frequency=is_sample_frequency,
        raw_size=len(data),
    )

    if len(data) >= _EXTENDED_SIZE:
        (
            stats.gs_instance_count,
            stats.hs_control_points,
            stats.hs_output_primitive,
            stats.hs_partitioning,
            stats.ds_tessellator_domain,
            stats.barrier_instructions,
            stats.interlocked_instructions,
            stats.texture_store_instructions,
        ) = _EXTENDED.unpack_from(data, _BASE_SIZE)

    return stats