"""Release cycle time for tagged Git repositories."""

__version__ = "0.1.0"
