"""
Enumeration classes for the Docker Service Manager.
"""

from enum import Enum


class OutcomeStatus(str, Enum):
    """Classification of a finished runtime invocation."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    FAULT = "fault"


class PruneTarget(str, Enum):
    """Runtime object kinds that can be pruned during maintenance."""
    CONTAINER = "container"
    IMAGE = "image"
    VOLUME = "volume"
    NETWORK = "network"
