"""
Invocation builder for the Docker Service Manager.

Maps a service definition and an action onto the runtime CLI argument
vector. Every value goes into its own list element; nothing here ever
produces a shell string to execute.
"""

from typing import List

from docker_svcman.core.errors import InvalidArgument
from docker_svcman.models.command import CommandDescription
from docker_svcman.models.enums import PruneTarget
from docker_svcman.models.service import ServiceDefinition


DEFAULT_RUNTIME = "docker"

JSON_LINES_FORMAT = "{{json .}}"


def _require_name(value: str, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{what} must be a non-empty string")
    return value.strip()


class InvocationBuilder:
    """
    Builds runtime command descriptions.

    All methods are pure: the same input always yields the same argument
    vector.
    """
    def __init__(self, runtime: str = DEFAULT_RUNTIME):
        self.runtime = _require_name(runtime, "Runtime executable")

    def _command(self, *args: str) -> CommandDescription:
        return CommandDescription(self.runtime, tuple(args))

    def build_start(self, definition: ServiceDefinition) -> CommandDescription:
        """
        Build the detached ``run`` invocation for a service.

        Args:
            definition: The service to start

        Returns:
            CommandDescription: ``run -d --name <id> [-p ...] [-v ...] [-e ...] <image> [command ...]``
        """
        args: List[str] = ["run", "-d", "--name", definition.id]

        for port in definition.ports:
            args.extend(["-p", port])

        for volume in definition.volumes:
            args.extend(["-v", volume])

        for name, value in definition.environment.items():
            args.extend(["-e", f"{name}={value}"])

        args.append(definition.image)
        args.extend(definition.command)

        return self._command(*args)

    def build_stop(self, service_id: str) -> List[CommandDescription]:
        """
        Build the stop-then-remove pair for a container name.

        Both invocations are meant to run regardless of the first one's result.
        """
        name = _require_name(service_id, "Service id")
        return [self._command("stop", name), self.build_remove(name)]

    def build_remove(self, service_id: str) -> CommandDescription:
        name = _require_name(service_id, "Service id")
        return self._command("rm", name)

    def build_pull(self, image_ref: str) -> CommandDescription:
        """
        Build the ``pull`` invocation for an image reference.

        Raises:
            InvalidArgument: If the reference is empty after trimming
        """
        ref = _require_name(image_ref, "Image reference")
        return self._command("pull", ref)

    def build_status(self, service_id: str) -> CommandDescription:
        """Query the live container state (``running``, ``exited``, ...)."""
        name = _require_name(service_id, "Service id")
        return self._command("inspect", "-f", "{{.State.Status}}", name)

    def build_list_containers(self, all_containers: bool = False) -> CommandDescription:
        args = ["ps"]
        if all_containers:
            args.append("-a")
        args.extend(["--format", JSON_LINES_FORMAT])
        return self._command(*args)

    def build_list_images(self) -> CommandDescription:
        return self._command("images", "--format", JSON_LINES_FORMAT)

    def build_stats(self) -> CommandDescription:
        return self._command("stats", "--no-stream", "--format", JSON_LINES_FORMAT)

    def build_prune(self, target: PruneTarget) -> CommandDescription:
        """Build ``<target> prune -f`` for one kind of unused runtime object."""
        try:
            target = PruneTarget(target)
        except ValueError:
            raise InvalidArgument(f"Cannot prune {target!r}") from None
        return self._command(target.value, "prune", "-f")
