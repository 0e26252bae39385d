"""Domain layer — rules, field/form models, and the submission lifecycle.

This layer depends only on stdlib and pydantic.
It must never import from engine, plugins, commands, or config.
"""
