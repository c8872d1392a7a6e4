[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "packetlink"
version = "0.1.0"
description = "A small TCP client and server that exchange length-prefixed messages and packets of values"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "socket", "serialization", "client", "server", "protocol"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
packetlink-client = "packetlink.client:main"
packetlink-server = "packetlink.server:main"

[tool.hatch.build.targets.wheel]
packages = ["packetlink"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
