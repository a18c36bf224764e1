"""Extractors that read release data from version control."""

from .git_extractor import GitExtractor

__all__ = ["GitExtractor"]
