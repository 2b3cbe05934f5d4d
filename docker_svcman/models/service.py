"""
Service definition model for the Docker Service Manager.
"""

import re
import shlex
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from docker_svcman.core.errors import InvalidArgument


# [ip:]host:container[/proto], where either port may be a range
PORT_PATTERN = re.compile(
    r'^(?:(?:\d{1,3}(?:\.\d{1,3}){3}|\[[0-9a-fA-F:]+\]):)?'
    r'\d{1,5}(?:-\d{1,5})?:\d{1,5}(?:-\d{1,5})?'
    r'(?:/(?:tcp|udp|sctp))?$'
)

VOLUME_MODES = {
    "ro", "rw", "z", "Z", "nocopy",
    "shared", "slave", "private", "rshared", "rslave", "rprivate",
    "consistent", "cached", "delegated",
}


def validate_port(port: str) -> str:
    """Check a ``host:container`` port mapping and return it unchanged."""
    if not isinstance(port, str) or not PORT_PATTERN.match(port):
        raise InvalidArgument(f"Invalid port mapping: {port!r} (expected 'host:container')")
    return port


def validate_volume(volume: str) -> str:
    """Check a ``source:target[:mode]`` mount and return it unchanged."""
    if not isinstance(volume, str):
        raise InvalidArgument(f"Invalid volume mapping: {volume!r}")

    parts = volume.split(':')
    if len(parts) not in (2, 3) or not parts[0] or not parts[1]:
        raise InvalidArgument(
            f"Invalid volume mapping: {volume!r} (expected 'source:target[:mode]')"
        )

    if len(parts) == 3:
        modes = parts[2].split(',')
        if not all(mode in VOLUME_MODES for mode in modes):
            raise InvalidArgument(f"Invalid volume mode in {volume!r}")

    return volume


def validate_env_name(name: str) -> str:
    """Check an environment variable name and return it unchanged."""
    if not isinstance(name, str) or not name or '=' in name:
        raise InvalidArgument(f"Invalid environment variable name: {name!r}")
    return name


def _as_sequence(value) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _as_pairs(value):
    """Yield (name, value) pairs from a mapping or a list of NAME=VALUE strings."""
    if not value:
        return
    if isinstance(value, Mapping):
        yield from value.items()
        return
    if isinstance(value, str):
        value = [value]
    for entry in value:
        if not isinstance(entry, str) or '=' not in entry:
            raise InvalidArgument(f"Invalid environment entry: {entry!r} (expected 'NAME=VALUE')")
        name, _, val = entry.partition('=')
        yield name, val


@dataclass(frozen=True)
class ServiceDefinition:
    """
    Static descriptor of a runnable containerized service.

    The ``id`` doubles as the runtime container name. Definitions are
    validated on construction and never change afterwards.
    """
    id: str
    name: str
    image: str
    description: str = ""
    ports: Tuple[str, ...] = ()
    volumes: Tuple[str, ...] = ()
    environment: Mapping[str, str] = field(default_factory=dict, hash=False)
    command: Tuple[str, ...] = ()
    is_llm: bool = False

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidArgument("Service id must be a non-empty string")
        if not isinstance(self.image, str) or not self.image.strip():
            raise InvalidArgument(f"Service {self.id!r} must declare a non-empty image")

        # Frozen dataclass: normalise through object.__setattr__
        ports = tuple(validate_port(p) for p in _as_sequence(self.ports))
        volumes = tuple(validate_volume(v) for v in _as_sequence(self.volumes))

        environment = {}
        for key, value in _as_pairs(self.environment):
            if key in environment:
                raise InvalidArgument(f"Duplicate environment variable: {key!r}")
            environment[validate_env_name(key)] = "" if value is None else str(value)

        if not isinstance(self.is_llm, bool):
            raise InvalidArgument(f"Service {self.id!r}: is_llm must be true or false, got {self.is_llm!r}")

        command = self.command or ()
        if isinstance(command, str):
            command = shlex.split(command)

        object.__setattr__(self, 'ports', ports)
        object.__setattr__(self, 'volumes', volumes)
        object.__setattr__(self, 'environment', MappingProxyType(environment))
        object.__setattr__(self, 'command', tuple(str(arg) for arg in command))
        object.__setattr__(self, 'name', self.name or self.id)
        object.__setattr__(self, 'description', self.description or "")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ServiceDefinition':
        """
        Build a definition from a configuration mapping.

        Args:
            data: Mapping with the dataclass field names as keys

        Returns:
            ServiceDefinition: The validated definition
        """
        if not isinstance(data, dict):
            raise InvalidArgument(f"Service entry must be a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidArgument(f"Unknown service field(s): {', '.join(sorted(unknown))}")

        for required in ('id', 'image'):
            if required not in data:
                raise InvalidArgument(f"Missing required service field: {required}")

        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the definition to a JSON-ready dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'image': self.image,
            'ports': list(self.ports),
            'volumes': list(self.volumes),
            'environment': dict(self.environment),
            'command': list(self.command),
            'is_llm': self.is_llm,
        }
