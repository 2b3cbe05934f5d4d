"""
Service catalog for the Docker Service Manager.

The catalog is a read-only registry of service definitions keyed by id.
It is built once at startup, either from the built-in list or from a YAML
configuration file, and handed to whoever needs it.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List

import yaml

from docker_svcman.core.errors import InvalidArgument, UnknownService
from docker_svcman.models.service import ServiceDefinition


logger = logging.getLogger('docker_svcman.catalog')


DEFAULT_SERVICES: List[Dict[str, Any]] = [
    {
        "id": "web_server_1",
        "name": "Simple Web Server",
        "description": "An Nginx web server",
        "image": "nginx:latest",
        "ports": ["8080:80"],
        "volumes": ["/data/web:/usr/share/nginx/html:ro"],
    },
    {
        "id": "data_processor",
        "name": "Data Processing Task",
        "description": "A custom data processing container",
        "image": "my_processor_image:v1.2",
        "environment": {"API_KEY": "dummy_key", "INPUT_DIR": "/data"},
        "command": "/app/run_processor.sh",
    },
    {
        "id": "llm_model_a",
        "name": "LLM Model A (Ollama)",
        "description": "Runs a specific LLM using Ollama",
        "image": "ollama/ollama",
        "ports": ["11434:11434"],
        "volumes": ["ollama_data:/root/.ollama"],
        "is_llm": True,
    },
    {
        "id": "mongodb",
        "name": "MongoDB Database",
        "description": "MongoDB NoSQL database",
        "image": "mongo:latest",
        "ports": ["27017:27017"],
        "volumes": ["mongo_data:/data/db"],
        "environment": {
            "MONGO_INITDB_ROOT_USERNAME": "admin",
            "MONGO_INITDB_ROOT_PASSWORD": "password",
        },
    },
    {
        "id": "redis_cache",
        "name": "Redis Cache",
        "description": "Redis in-memory data structure store",
        "image": "redis:latest",
        "ports": ["6379:6379"],
        "volumes": ["redis_data:/data"],
    },
]


class ServiceCatalog:
    """
    Read-only registry of service definitions.
    """
    def __init__(self, definitions: Iterable[ServiceDefinition]):
        self._services: Dict[str, ServiceDefinition] = {}
        for definition in definitions:
            if not isinstance(definition, ServiceDefinition):
                raise InvalidArgument(f"Not a service definition: {definition!r}")
            if definition.id in self._services:
                raise InvalidArgument(f"Duplicate service id: {definition.id!r}")
            self._services[definition.id] = definition

    @classmethod
    def from_dicts(cls, entries: Iterable[Dict[str, Any]]) -> 'ServiceCatalog':
        """Build a catalog from configuration mappings."""
        return cls(ServiceDefinition.from_dict(dict(entry)) for entry in entries)

    @classmethod
    def default(cls) -> 'ServiceCatalog':
        """The built-in catalog of five services."""
        return cls.from_dicts(DEFAULT_SERVICES)

    @classmethod
    def from_yaml(cls, path: str) -> 'ServiceCatalog':
        """
        Load a catalog from a YAML file.

        The file holds either a top-level ``services`` list or a bare list
        of service mappings.

        Args:
            path: Path to the YAML file

        Returns:
            ServiceCatalog: The loaded catalog
        """
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise InvalidArgument(f"Cannot read catalog file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise InvalidArgument(f"Invalid YAML in catalog file {path}: {e}") from e

        if isinstance(data, dict):
            data = data.get('services')
        if not isinstance(data, list):
            raise InvalidArgument(f"Catalog file {path} must contain a 'services' list")

        catalog = cls.from_dicts(data)
        logger.info(f"Loaded {len(catalog)} services from {path}")
        return catalog

    def lookup(self, service_id: str) -> ServiceDefinition:
        """
        Find a service definition by id.

        Raises:
            UnknownService: If no service has this id
        """
        try:
            return self._services[service_id]
        except (KeyError, TypeError):
            raise UnknownService(service_id) from None

    def list(self) -> List[ServiceDefinition]:
        """All definitions in declaration order."""
        return list(self._services.values())

    def ids(self) -> List[str]:
        return list(self._services)

    def __contains__(self, service_id) -> bool:
        return service_id in self._services

    def __iter__(self) -> Iterator[ServiceDefinition]:
        return iter(self._services.values())

    def __len__(self) -> int:
        return len(self._services)
