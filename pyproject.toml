[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "district"
version = "0.1.0"
description = "Game server companion: player, punishment and leaderboard databases, batched log relaying and server status tracking"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "game-server",
    "players",
    "leaderboards",
    "moderation",
    "sqlite",
    "logging",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["district"]

[tool.hatch.build.targets.sdist]
include = ["district", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
