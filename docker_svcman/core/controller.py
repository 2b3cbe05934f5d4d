"""
Service controller for the Docker Service Manager.

This module orchestrates the service lifecycle: it resolves services in the
catalog, builds runtime invocations and turns their results into outcomes.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, List

from docker_svcman.core.catalog import ServiceCatalog
from docker_svcman.core.errors import ExecutionFault
from docker_svcman.core.executor import RuntimeExecutor
from docker_svcman.core.invocation import InvocationBuilder
from docker_svcman.models.command import CommandDescription
from docker_svcman.models.enums import OutcomeStatus
from docker_svcman.models.outcome import ServiceOutcome
from docker_svcman.models.service import ServiceDefinition


logger = logging.getLogger('docker_svcman.controller')


class ServiceController:
    """
    Starts, stops and pulls services through the container runtime.

    No container state is kept here; every question about a container is
    answered by the runtime at the time it is asked.
    """
    def __init__(self, catalog: ServiceCatalog, builder: InvocationBuilder = None,
                 executor: RuntimeExecutor = None):
        self.catalog = catalog
        self.builder = builder or InvocationBuilder()
        self.executor = executor or RuntimeExecutor()
        # service id -> [lock, number of threads holding or waiting for it]
        self._locks: Dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _service_lock(self, service_id: str):
        """
        Hold the lock for one service id so requests for it never overlap.

        The entry is dropped once no thread holds or waits for it, so arbitrary
        container names do not accumulate.
        """
        with self._locks_guard:
            entry = self._locks.get(service_id)
            if entry is None:
                entry = self._locks[service_id] = [threading.Lock(), 0]
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[service_id]

    def run(self, command: CommandDescription) -> ServiceOutcome:
        """
        Execute one invocation, turning an execution fault into an outcome.

        Args:
            command: The invocation to run

        Returns:
            ServiceOutcome: The classified result
        """
        try:
            return self.executor.execute(command)
        except ExecutionFault as e:
            logger.error(f"Execution fault for '{command.display()}': {str(e)}")
            return ServiceOutcome.fault(str(e), command=command.display())

    def list_catalog(self) -> List[ServiceDefinition]:
        """List the services known to the catalog."""
        return self.catalog.list()

    def start(self, service_id: str) -> ServiceOutcome:
        """
        Start a catalog service as a detached container named after its id.

        Starting a service whose container already exists fails in the
        runtime (duplicate name) and that failure is returned unchanged.

        Raises:
            UnknownService: If the id is not in the catalog
        """
        definition = self.catalog.lookup(service_id)
        command = self.builder.build_start(definition)

        with self._service_lock(definition.id):
            logger.info(f"Starting service {definition.id} ({definition.image})")
            outcome = self.run(command)

        if outcome.success:
            logger.info(f"Service {definition.id} started")
        else:
            logger.error(f"Failed to start service {definition.id}: {outcome.message}")
        return outcome

    def stop(self, service_id: str, remove: bool = True) -> ServiceOutcome:
        """
        Stop a container and, by default, remove it.

        The removal runs even when the stop fails, since the container may
        already be stopped. The operation succeeds if either step does.

        Args:
            service_id: Container name; it does not have to be in the catalog
            remove: Also remove the container after stopping it

        Returns:
            ServiceOutcome: Combined result with the sub-results in ``steps``

        Raises:
            InvalidArgument: If the id is blank
        """
        commands = self.builder.build_stop(service_id)
        if not remove:
            commands = commands[:1]
        name = service_id.strip()

        with self._service_lock(name):
            logger.info(f"Stopping service {name}" + (" and removing it" if remove else ""))
            steps = [self.run(command) for command in commands]

        outcome = self._combine(steps)
        if outcome.success:
            logger.info(f"Service {name} stopped")
        else:
            logger.error(f"Failed to stop service {name}: {outcome.message}")
        return outcome

    def pull_image(self, image_ref: str) -> ServiceOutcome:
        """
        Pull an image into the local runtime.

        Raises:
            InvalidArgument: If the reference is blank
        """
        command = self.builder.build_pull(image_ref)
        logger.info(f"Pulling image {command.args[-1]}")
        return self.run(command)

    def status(self, service_id: str) -> ServiceOutcome:
        """Ask the runtime for the container's current state."""
        return self.run(self.builder.build_status(service_id))

    @staticmethod
    def _combine(steps: List[ServiceOutcome]) -> ServiceOutcome:
        """Fold sub-step outcomes: success if any step succeeded."""
        success = any(step.success for step in steps)
        exit_codes = [step.exit_code for step in steps if step.exit_code is not None]

        if success:
            status = OutcomeStatus.SUCCEEDED
        elif not exit_codes:
            status = OutcomeStatus.FAULT
        else:
            status = OutcomeStatus.FAILED

        errors = [step.error for step in steps if step.error]
        return ServiceOutcome(
            success=success,
            exit_code=exit_codes[-1] if exit_codes else None,
            stdout="\n".join(step.stdout for step in steps if step.stdout),
            stderr="\n".join(step.stderr for step in steps if step.stderr),
            status=status,
            steps=steps,
            error=errors[0] if errors and status == OutcomeStatus.FAULT else None,
            command="\n".join(step.command for step in steps if step.command) or None,
        )
