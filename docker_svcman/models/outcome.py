"""
Outcome model for the Docker Service Manager.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from docker_svcman.models.enums import OutcomeStatus


@dataclass
class ServiceOutcome:
    """
    Result of one lifecycle operation.

    ``exit_code`` is None only for a fault, where the runtime never ran.
    Composite operations (stop then remove) keep their sub-results in ``steps``.
    """
    success: bool
    exit_code: Optional[int]
    stdout: str = ""
    stderr: str = ""
    status: OutcomeStatus = None
    steps: List['ServiceOutcome'] = field(default_factory=list)
    error: Optional[str] = None
    command: Optional[str] = None

    def __post_init__(self):
        if self.status is None:
            if self.exit_code is None:
                self.status = OutcomeStatus.FAULT
            elif self.success:
                self.status = OutcomeStatus.SUCCEEDED
            else:
                self.status = OutcomeStatus.FAILED

    @classmethod
    def from_exit(cls, exit_code: int, stdout: str = "", stderr: str = "",
                  command: str = None) -> 'ServiceOutcome':
        """Classify a finished process by its exit code."""
        return cls(
            success=exit_code == 0,
            exit_code=exit_code,
            stdout=stdout or "",
            stderr=stderr or "",
            command=command,
        )

    @classmethod
    def fault(cls, error: str, command: str = None) -> 'ServiceOutcome':
        """Outcome for a runtime that could not be spawned or timed out."""
        return cls(
            success=False,
            exit_code=None,
            status=OutcomeStatus.FAULT,
            error=error,
            command=command,
        )

    @property
    def is_fault(self) -> bool:
        return self.status == OutcomeStatus.FAULT

    @property
    def message(self) -> str:
        """Best single-line explanation of the outcome for an operator."""
        if self.error:
            return self.error
        text = (self.stderr if not self.success else self.stdout) or ""
        text = text.strip()
        if text:
            return text.splitlines()[-1]
        if self.success:
            return "OK"
        return f"exit code {self.exit_code}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert outcome to dictionary representation."""
        return {
            'success': self.success,
            'exit_code': self.exit_code,
            'status': self.status.value,
            'stdout': self.stdout,
            'stderr': self.stderr,
            'error': self.error,
            'command': self.command,
            'steps': [step.to_dict() for step in self.steps],
        }
