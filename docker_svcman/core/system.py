"""
System inspection and maintenance for the Docker Service Manager.

Host resources come from psutil; everything about containers and images is
asked of the runtime through the controller.
"""

import os
import sys
import logging
from typing import Any, Dict, List

import psutil

from docker_svcman.core.controller import ServiceController
from docker_svcman.models.command import CommandDescription
from docker_svcman.models.enums import OutcomeStatus, PruneTarget
from docker_svcman.models.outcome import ServiceOutcome


logger = logging.getLogger('docker_svcman.system')

DROP_CACHES_PATH = "/proc/sys/vm/drop_caches"

PRUNE_ORDER = [
    PruneTarget.CONTAINER,
    PruneTarget.IMAGE,
    PruneTarget.VOLUME,
    PruneTarget.NETWORK,
]


def get_system_resources(disk_path: str = '/') -> Dict[str, Any]:
    """
    Get a snapshot of host CPU, memory, swap and disk usage.

    Args:
        disk_path: Mount point to report disk usage for

    Returns:
        Dict[str, Any]: Resource figures, sizes in bytes
    """
    memory = psutil.virtual_memory()
    swap = psutil.swap_memory()
    disk = psutil.disk_usage(disk_path)

    return {
        "cpu": {
            "percent": psutil.cpu_percent(interval=0.1),
            "per_core": psutil.cpu_percent(percpu=True),
            "count": psutil.cpu_count(),
        },
        "memory": {
            "total": memory.total,
            "used": memory.used,
            "available": memory.available,
            "percent": memory.percent,
        },
        "swap": {
            "total": swap.total,
            "used": swap.used,
            "percent": swap.percent,
        },
        "disk": {
            "path": disk_path,
            "total": disk.total,
            "used": disk.used,
            "free": disk.free,
            "percent": disk.percent,
        },
    }


def list_containers(controller: ServiceController, all_containers: bool = False) -> ServiceOutcome:
    """List running containers, or all of them."""
    return controller.run(controller.builder.build_list_containers(all_containers))


def list_images(controller: ServiceController) -> ServiceOutcome:
    return controller.run(controller.builder.build_list_images())


def container_stats(controller: ServiceController) -> ServiceOutcome:
    """One-shot resource usage table for running containers."""
    return controller.run(controller.builder.build_stats())


def cleanup(controller: ServiceController) -> List[ServiceOutcome]:
    """
    Prune stopped containers and unused images, volumes and networks.

    Every prune runs even if an earlier one fails.

    Returns:
        List[ServiceOutcome]: One outcome per prune, in PRUNE_ORDER
    """
    outcomes = []
    for target in PRUNE_ORDER:
        logger.info(f"Pruning unused {target.value}s")
        outcomes.append(controller.run(controller.builder.build_prune(target)))
    return outcomes


def clear_system_cache(controller: ServiceController) -> ServiceOutcome:
    """
    Flush file system buffers and drop the Linux page cache.

    Needs root. On other platforms this reports a failure without doing anything.
    """
    if not sys.platform.startswith('linux'):
        return ServiceOutcome(
            success=False,
            exit_code=1,
            stderr=f"Clearing the system cache is not supported on {sys.platform}",
        )

    sync_outcome = controller.run(CommandDescription("sync"))
    if not sync_outcome.success:
        return sync_outcome

    try:
        with open(DROP_CACHES_PATH, 'w') as f:
            f.write("3\n")
    except PermissionError:
        logger.warning("Dropping caches requires root permissions")
        return ServiceOutcome(
            success=False,
            exit_code=1,
            stderr=f"Permission denied writing {DROP_CACHES_PATH}; run as root",
            steps=[sync_outcome],
        )
    except OSError as e:
        logger.error(f"Failed to drop caches: {str(e)}")
        return ServiceOutcome(
            success=False,
            exit_code=1,
            stderr=str(e),
            steps=[sync_outcome],
        )

    logger.info("System caches dropped")
    return ServiceOutcome(
        success=True,
        exit_code=0,
        stdout="System caches dropped",
        status=OutcomeStatus.SUCCEEDED,
        steps=[sync_outcome],
    )


def is_root() -> bool:
    return hasattr(os, 'geteuid') and os.geteuid() == 0
