"""Command line interface."""

from .arguments import parse_arguments
