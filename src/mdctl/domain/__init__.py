"""Domain layer — content types, paths, embeds, safety rules, errors.

This layer depends only on stdlib and pydantic and performs no disk I/O.
It must never import from services, infrastructure, commands, or config.
"""
