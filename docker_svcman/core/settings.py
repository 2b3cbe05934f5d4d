"""
Runtime settings for the Docker Service Manager.

Values come from environment variables and may be overridden by
command-line options.
"""

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from docker_svcman.core.catalog import ServiceCatalog
from docker_svcman.core.controller import ServiceController
from docker_svcman.core.errors import InvalidArgument
from docker_svcman.core.executor import DEFAULT_TIMEOUT, RuntimeExecutor
from docker_svcman.core.invocation import DEFAULT_RUNTIME, InvocationBuilder


ENV_PREFIX = "DOCKER_SVCMAN_"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _float_env(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(ENV_PREFIX + key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InvalidArgument(f"{ENV_PREFIX}{key} must be a number, got {raw!r}") from None
    if value < 0:
        raise InvalidArgument(f"{ENV_PREFIX}{key} must not be negative")
    return value


@dataclass
class Settings:
    """Configuration for one process."""
    runtime: str = DEFAULT_RUNTIME
    timeout: float = DEFAULT_TIMEOUT
    catalog_path: Optional[str] = None
    log_level: str = "WARNING"
    maintenance_interval: float = 86400.0

    @classmethod
    def from_env(cls, env: Mapping[str, str] = None) -> 'Settings':
        """Read settings from ``DOCKER_SVCMAN_*`` environment variables."""
        env = os.environ if env is None else env

        log_level = env.get(ENV_PREFIX + "LOG_LEVEL", "WARNING").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise InvalidArgument(f"Unknown log level: {log_level}")

        return cls(
            runtime=env.get(ENV_PREFIX + "RUNTIME") or DEFAULT_RUNTIME,
            timeout=_float_env(env, "TIMEOUT", DEFAULT_TIMEOUT),
            catalog_path=env.get(ENV_PREFIX + "CATALOG") or None,
            log_level=log_level,
            maintenance_interval=_float_env(env, "MAINTENANCE_INTERVAL", 86400.0),
        )

    def load_catalog(self) -> ServiceCatalog:
        """The configured catalog, or the built-in one if no file is set."""
        if self.catalog_path:
            return ServiceCatalog.from_yaml(self.catalog_path)
        return ServiceCatalog.default()


def configure_logging(level: str = "WARNING"):
    """Configure root logging for an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()]
    )


def build_controller(settings: Settings = None) -> ServiceController:
    """
    Wire catalog, builder and executor into a controller.

    Args:
        settings: Settings to use; read from the environment if omitted

    Returns:
        ServiceController: Ready-to-use controller
    """
    settings = settings or Settings.from_env()
    return ServiceController(
        catalog=settings.load_catalog(),
        builder=InvocationBuilder(settings.runtime),
        executor=RuntimeExecutor(timeout=settings.timeout),
    )
