"""Command-line entry point."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from beleg.lex import Token, TokenKind


def _build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="beleg",
        description="Print a sample of formatted tokens.",
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Print three sample tokens and return the exit status."""
    _build_parser().parse_args(argv)

    and_ = Token(TokenKind.AND, 0, 3)
    or_ = Token(TokenKind.OR, 4, 6)
    plus = Token(TokenKind.PLUS, 7, 8)
    print(f"{and_}, {or_}, {plus}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())