"""Command line interface for git-backup."""

from .dispatcher import create_parser, main

__all__ = ["create_parser", "main"]
