"""Infrastructure layer: the graph store collaborator.

This layer depends on stdlib and third-party libs (pydantic, pydgraph).
It must never import from domain, services, commands, or output.
The service layer bridges between domain text and infrastructure.
"""
