[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dxbc"
version = "0.1.0"
description = "DXBC (DirectX Bytecode) container parser and metadata chunk reader/writer"
requires-python = ">=3.10"
dependencies = []
keywords = ["dxbc", "directx", "shader", "hlsl", "root-signature"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Disassemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dxbc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
