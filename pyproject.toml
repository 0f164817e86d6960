[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "subrpc"
version = "0.1.0"
description = "Synchronous JSON-RPC client for Substrate-based nodes: chain, state, system, payment, events and extrinsic submission."
requires-python = ">=3.10"
keywords = ["substrate", "polkadot", "json-rpc", "websocket", "blockchain", "rpc"]
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
    "Topic :: Software Development :: Libraries",
]
dependencies = [
    "websocket-client",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["subrpc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
