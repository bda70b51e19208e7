[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "pokearena"
version = "0.1.0"
description = "A small four-player monster tournament: record files, growth events, turn-based battles and named-pipe chat."
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "tournament", "turn-based", "monsters", "shared-memory", "fifo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
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
pokearena-monsterdex = "pokearena.monsterdex:main"
pokearena-skilldex = "pokearena.skilldex:main"
pokearena-events = "pokearena.events:main"
pokearena-grow = "pokearena.growth:main"
pokearena-battle = "pokearena.battle:main"
pokearena-tournament = "pokearena.tournament:main"
pokearena-pipes = "pokearena.pipes:main"

[tool.setuptools.packages.find]
include = ["pokearena*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
