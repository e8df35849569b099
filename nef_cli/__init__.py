"""Console entrypoint for the nef CLI."""

from .main import build_parser, main

__all__ = ["build_parser", "main"]
