[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hab"
version = "0.1.0"
description = "A terminal habit tracker with contribution-style grids"
requires-python = ">=3.10"
keywords = ["habits", "tracker", "terminal", "tui", "streak"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]
dependencies = [
    "blessed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
hab = "hab.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["hab"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
