[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "precisepack"
version = "0.1.10"
description = "MessagePack encoding and decoding that keeps the exact wire format of every value"
requires-python = ">=3.10"
keywords = ["messagepack", "msgpack", "serialization", "encoding", "parsing"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: File Formats",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["precisepack"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
