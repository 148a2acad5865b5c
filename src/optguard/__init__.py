"""optguard: option sanitization engine for site settings bundles."""

__version__ = "0.1.0"
