"""Domain layer: transforms, rules, registry, and the option catalog.

This layer depends on stdlib, pydantic, and the sanitizer libraries behind
the rules (nh3, email-validator).
It must never import from services, infrastructure, commands, or config.
"""
