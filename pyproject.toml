[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "asyncbuf"
version = "39.3"
description = "Double-buffered file I/O that reads ahead and writes behind on a background thread"
requires-python = ">=3.10"
dependencies = []
keywords = ["file", "io", "buffering", "double-buffer", "read-ahead", "write-behind"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["asyncbuf"]

[tool.hatch.build.targets.sdist]
include = ["asyncbuf", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
