"""Presentation: Rich rendering, list presenters, and notification sinks."""
