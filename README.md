# dxbc

Read and write DXBC (DirectX Bytecode) containers, which is the binary format that
`fxc` produces and Direct3D 10–12 consumes. The package also decodes and re-encodes
several of the metadata chunks inside those containers. It uses only the
standard library.

## Modules

- `dxbc.container`
  - `scan_dxbc(data)` finds DXBC containers in a byte buffer, including
    several placed back to back. It returns a list of `DxbcContainer`
    objects. Each one has `offset_in_file`, `total_size` and `chunks`, a list
    of `DxbcChunk` with `fourcc`, `size` and `data`. `DxbcChunk.fourcc_str()`
    returns the tag as text, or `"????"` when the tag is not valid UTF-8.
    `str(container)` gives `DXBC at 0x<offset>, size=<n>, chunks=<n>`.
  - `build_dxbc(chunks)` assembles a container from `WritableChunk(fourcc, data)`
    objects. The 16-byte hash field is left zeroed.
- `dxbc.signature`
  - Handles signature chunks: `ISGN`, `OSGN`, `PCSG` (24-byte elements), `OSG5`
    (28 bytes, with a stream) and `ISG1`, `OSG1`, `PSG1` (32 bytes, with a
    stream and a minimum precision).
  - `parse_signature(fourcc, data)` returns a list of `SignatureElement`.
  - `write_signature(fourcc, elements)` returns a `WritableChunk`.
  - The module also has the `Signature` class, plus `SignatureVersion`,
    `MinPrecision` and `ComponentType`.
- `dxbc.stat`
  - `parse_stat(data)` returns a `ShaderStats` object.
  - It raises `ValueError` when the payload is shorter than 116 bytes.
  - The extended fields are read when the payload has at least 152 bytes.
  - `raw_size` records the original payload size, and writing emits exactly
    that many bytes.
- `dxbc.sfi0`
  - `parse_sfi0(data)` returns a `ShaderFeatureInfo`. Its `flags` is a 64-bit
    value, and any missing words read as zero.
  - `ShaderFeatureInfo.has(flag)` tests a `FeatureFlag` bit.
- `dxbc.rts0`
  - `parse_rts0(data)` returns a `RootSignature`.
  - It raises `ValueError` when the payload is shorter than 24 bytes or when a
    referenced field runs past its end.
  - A `RootSignature` holds `RootParameter` entries and `StaticSampler`
    entries. Each parameter's `param_type` is a `DescriptorTable` (of
    `DescriptorRange`), `Constants32Bit`, `RootCbv`, `RootSrv` or `RootUav`.

`Signature`, `ShaderStats`, `ShaderFeatureInfo` and `RootSignature` have two methods for writing:

- `to_bytes()` returns the chunk payload.
- `to_chunk()` returns a `WritableChunk` that is ready for `build_dxbc`.

`str()` on any of these types gives a commented listing in disassembly style.

## Installation

```
pip install .
```

## Example

```python
from dxbc.container import scan_dxbc, build_dxbc
from dxbc.signature import parse_signature
from dxbc.stat import parse_stat

SIGNATURES = {"ISGN", "OSGN", "PCSG", "OSG5", "ISG1", "OSG1", "PSG1"}

with open("shader.cso", "rb") as fh:
    data = fh.read()

for container in scan_dxbc(data):
    print(container)
    for chunk in container.chunks:
        name = chunk.fourcc_str()
        if name in SIGNATURES:
            for element in parse_signature(name, chunk.data):
                print(element)
        elif name == "STAT":
            try:
                print(parse_stat(chunk.data))
            except ValueError as exc:
                print(f"// bad STAT chunk: {exc}")
```

To build a container from chunks:

```python
from dxbc.container import build_dxbc
from dxbc.sfi0 import FeatureFlag, ShaderFeatureInfo

info = ShaderFeatureInfo(flags=FeatureFlag.DOUBLES | FeatureFlag.ROVS)
blob = build_dxbc([info.to_chunk()])
```

## What it does not do

- It does not decode, disassemble or re-encode shader bytecode. A `SHEX` or
  `SHDR` chunk is available only as raw bytes in `DxbcChunk.data`.
- It has no parser for resource definitions (`RDEF`) or for other chunk types
  not listed above.
- It does not compute or check the container hash.
- There is no command-line tool. The package is a library.

## Running the tests

```
pip install .[test]
pytest
```