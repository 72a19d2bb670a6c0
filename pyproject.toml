[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qmeta"
version = "0.4.2"
description = "Typed, ordered metadata store with typed accessors and optional schema validation"
requires-python = ">=3.10"
keywords = ["metadata", "schema", "typed", "key-value", "validation"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["qmeta"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
