"""Infrastructure layer: option storage, defaults, and the settings context.

This layer depends on stdlib and third-party libs (SQLAlchemy, pluggy).
It must never import from services, commands, or output.
"""
