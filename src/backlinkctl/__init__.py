"""backlinkctl: bidirectional link maintenance for markdown notes."""

__version__ = "0.1.0"
