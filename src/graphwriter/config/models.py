"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, graphwriter.toml only contains
overrides. An empty file is a valid config.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    address: str = "localhost:9080"


class WorkerConfig(BaseModel):
    """[worker] section.

    ``call_timeout`` is how long a caller waits for the serializer;
    ``apply_timeout`` is how long the store may take. Callers must always
    outlast the store so the two failures stay distinguishable.
    """

    model_config = {"frozen": True}

    apply_timeout: float = Field(default=60.0, gt=0)
    call_timeout: float = Field(default=75.0, gt=0)

    @model_validator(mode="after")
    def _call_outlasts_apply(self) -> WorkerConfig:
        if self.call_timeout <= self.apply_timeout:
            msg = (
                f"worker.call_timeout ({self.call_timeout}) must be greater than "
                f"worker.apply_timeout ({self.apply_timeout})"
            )
            raise ValueError(msg)
        return self
