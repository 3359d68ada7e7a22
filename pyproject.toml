[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "beleg"
version = "0.1.0"
description = "Front-end building blocks for the Beleg language: source maps, lexer, flat AST, diagnostics, parser scaffolding and a project file tree."
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "lexer", "parser", "ast", "diagnostics", "source-map"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
beleg = "beleg.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["beleg"]

[tool.hatch.build.targets.sdist]
include = ["beleg", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
