"""Output formatters for license-curator."""

from license_curator.output.json_output import JsonFormatter
from license_curator.output.terminal import TerminalFormatter

__all__ = [
    "JsonFormatter",
    "TerminalFormatter",
]
