"""Utility functions for DocRecall."""

from docrecall.utils.binary import is_binary_content

__all__ = ["is_binary_content"]
