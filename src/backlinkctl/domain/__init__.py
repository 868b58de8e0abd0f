"""Domain layer: link types, detection rules, and pure text transforms.

This layer depends only on the stdlib.
It must never import from services, infrastructure, commands, or config.
"""
