[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nvbridge"
version = "0.1.0"
description = "Building blocks for a Neovim GUI client: redraw event parsing, API info, command line and process launching"
requires-python = ">=3.10"
dependencies = []
keywords = ["neovim", "nvim", "gui", "redraw", "ui-protocol"]
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
    "Topic :: Text Editors",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nvbridge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
