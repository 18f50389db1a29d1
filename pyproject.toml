[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rpptools"
version = "0.1.0"
description = "Toolkit for the RPP language: lexer, constant evaluator, config readers, peephole optimizer, register VM and runtime helpers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "compiler",
    "virtual-machine",
    "lexer",
    "peephole-optimizer",
    "bytecode",
    "utf-16",
]
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
    "Topic :: Software Development :: Compilers",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rpptools = "rpptools.cli:main"
rpptools-cpuload = "rpptools.cpuload:main"

[tool.hatch.build.targets.wheel]
packages = ["rpptools"]

[tool.hatch.build.targets.sdist]
include = ["rpptools", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
