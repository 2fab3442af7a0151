"""Preparation of the target table before any load is applied."""

from __future__ import annotations

from typing import TYPE_CHECKING

from docbench._internal.errors import ResourceError, TransportError
from docbench._internal.logging import get_logger

if TYPE_CHECKING:
    from docbench._internal.config import BenchmarkConfig
    from docbench.transport.http_client import HttpSender

logger = get_logger("engine.resource")

STATUS_OK = 200
STATUS_CREATED = 201
STATUS_NOT_FOUND = 404


class TargetResourceManager:
    """Makes sure the target table exists, optionally recreating it.

    Runs once on the orchestrator's thread before any worker starts:

    - table missing (404): create it with PUT, expecting 201
    - table present and ``clean``: DELETE expecting 200, then create
    - table present otherwise: nothing to do

    Only a 200 probe counts as "present" for the delete path; any other
    probe status leaves the table untouched.

    Any other outcome raises ``ResourceError`` naming the failed step.
    """

    def __init__(self, client: HttpSender) -> None:
        """Initialize the manager.

        Args:
            client: HTTP client carrying any authentication headers.
        """
        self._client = client

    def ensure(self, config: BenchmarkConfig) -> None:
        """Prepare the table described by ``config``.

        Args:
            config: Benchmark configuration.

        Raises:
            ResourceError: If the probe, delete or create step fails.
        """
        url = config.resource_url
        status = self._call("probe", "GET", url)

        if status == STATUS_NOT_FOUND:
            self._create(config)
            return

        if status == STATUS_OK and config.clean:
            logger.info("Deleting benchmark table %s", config.table_name)
            status = self._call("delete", "DELETE", url)
            if status != STATUS_OK:
                raise ResourceError(
                    "delete", url, f"unexpected status {status}", status=status
                )
            self._create(config)
            return

        if status != STATUS_OK:
            logger.warning(
                "Probe of table %s returned status %d, leaving it untouched",
                config.table_name,
                status,
            )
            return
        logger.info("Using existing table %s", config.table_name)

    def _create(self, config: BenchmarkConfig) -> None:
        url = config.create_url
        logger.info("Creating benchmark table %s", config.table_name)
        status = self._call("create", "PUT", url)
        if status != STATUS_CREATED:
            raise ResourceError(
                "create", url, f"unexpected status {status}", status=status
            )

    def _call(self, step: str, method: str, url: str) -> int:
        try:
            return self._client.send(method, url)
        except TransportError as exc:
            raise ResourceError(step, url, str(exc)) from exc
