"""Configuration: TOML discovery, pydantic settings, logging."""
