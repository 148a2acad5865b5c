"""Configuration layer: TOML discovery, settings models, logging setup."""
