[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fishcore"
version = "0.1.0"
description = "Chess position core: bitboards, Zobrist hashing, piece-square tables, move making and static exchange evaluation"
requires-python = ">=3.10"
dependencies = []
keywords = ["chess", "bitboard", "fen", "zobrist", "chess960", "static-exchange"]
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
    "Topic :: Games/Entertainment :: Board Games",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fishcore"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
