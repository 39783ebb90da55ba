"""graphwriter: deterministic upsert synthesis and serialized access to a graph store."""

__version__ = "0.1.0"
