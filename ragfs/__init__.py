"""Sentence-window retrieval pipeline over an Infinity store."""

__version__ = "0.1.0"
