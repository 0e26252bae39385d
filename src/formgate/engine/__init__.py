"""Engine layer — validation, field registry, store, submission, bindings.

The engine may import from domain, errors, and plugins.
It must never import from commands, output, or config.
"""
