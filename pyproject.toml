[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wooridb"
version = "0.1.0"
description = "Storage and query core of a time-travel document database: transaction log lines, data files, result shaping and set relations"
requires-python = ">=3.10"
keywords = ["database", "time-travel", "transaction-log", "ron", "document-store"]
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
    "Topic :: Database :: Database Engines/Servers",
]
dependencies = [
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["wooridb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
