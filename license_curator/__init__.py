"""License policy evaluation and curation workflow."""

__version__ = "0.1.0"
