[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "protodeck"
version = "0.1.0"
description = "Workspace tools for raw Protocol Buffers payloads: input decoding, envelope frames, hex cells and a local message catalog."
requires-python = ">=3.10"
keywords = ["protobuf", "protocol-buffers", "envelope", "hex", "inspector", "no-schema"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Debuggers",
]
dependencies = [
    "brotli",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["protodeck"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
