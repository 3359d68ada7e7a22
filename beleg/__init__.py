"""Front-end building blocks for the Beleg language: source maps, lexer, AST, diagnostics, parser scaffolding and a project file tree."""

__version__ = "0.1.0"