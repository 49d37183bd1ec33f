"""Core layer — value types, definitions, validation, construction, registry.

This layer depends only on stdlib and pydantic, plus the plugin layer
for dispatching cross-reference resolvers.
It must never import from services, infrastructure, commands, or config.
"""
