[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hexclash"
version = "0.7.0"
description = "A small networked turn-based strategy game played on a hexagonal field of growing cells"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "turn-based", "strategy", "multiplayer", "hexagonal", "tcp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Turn Based Strategy",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
hexclash-host = "hexclash.host:main"
hexclash-console = "hexclash.console:main"

[tool.hatch.build.targets.wheel]
packages = ["hexclash"]

[tool.pytest.ini_options]
addopts = "-ra"
