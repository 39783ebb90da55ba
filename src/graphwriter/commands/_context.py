"""AppContext: shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Owns the MutationSerializer, built lazily so
``--help`` and ``render`` never open a store connection.
"""

from __future__ import annotations

import json
from typing import IO, TYPE_CHECKING, NoReturn

import click

from graphwriter.config.logging import configure_logging
from graphwriter.domain.refs import QueryBuildError, Triple, triples_from_json
from graphwriter.output.formatters import OutputSettings, format_result
from graphwriter.services.result import ServiceResult

if TYPE_CHECKING:
    from graphwriter.config.settings import GraphwriterSettings
    from graphwriter.services.serializer import MutationSerializer


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: GraphwriterSettings) -> None:
        self.settings = settings
        self._serializer: MutationSerializer | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from graphwriter.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def serializer(self) -> MutationSerializer:
        """The serializer (and its store connection), created on first access.

        Closed automatically when the Click context tears down.
        """
        if self._serializer is None:
            from graphwriter.infrastructure.store import DgraphStore
            from graphwriter.services.serializer import MutationSerializer

            self._serializer = MutationSerializer(
                DgraphStore(self.settings.store.address),
                apply_timeout=self.settings.worker.apply_timeout,
                call_timeout=self.settings.worker.call_timeout,
            )
            click.get_current_context().call_on_close(self.close)
        return self._serializer

    def close(self) -> None:
        if self._serializer is not None:
            self._serializer.close()
            self._serializer = None

    def read_triples(self, op: str, stream: IO[str]) -> list[Triple]:
        """Decode a JSON triples file, failing the command on bad input."""
        try:
            data = json.load(stream)
        except json.JSONDecodeError as exc:
            self.fail(ServiceResult.failure(op, "INVALID_JSON", str(exc)))
        try:
            return triples_from_json(data)
        except QueryBuildError as exc:
            self.fail(ServiceResult.failure(op, "INVALID_TRIPLES", str(exc)))

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout, returns normally.
        * Failure: writes to stderr, exits with code 1.
        """
        if not result.ok:
            self.fail(result)
        click.echo(format_result(result, settings=self._output_settings()))

    def fail(self, result: ServiceResult) -> NoReturn:
        """Write a failed result to stderr and exit with code 1."""
        click.echo(format_result(result, settings=self._output_settings()), err=True)
        raise SystemExit(1)

    def _output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )
