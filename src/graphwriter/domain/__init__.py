"""Domain layer: refs, triples, variable names, and query text.

This layer depends only on stdlib.
It must never import from services, infrastructure, commands, or config.
"""
