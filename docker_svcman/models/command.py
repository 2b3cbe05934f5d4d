"""
Command description model for the Docker Service Manager.
"""

import shlex
from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class CommandDescription:
    """
    An executable plus an ordered list of discrete arguments.

    The argument vector is handed to the child process as-is and is never
    joined into a shell string for execution.
    """
    executable: str
    args: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'args', tuple(str(arg) for arg in self.args))

    @property
    def argv(self) -> List[str]:
        """The full argument vector, executable first."""
        return [self.executable, *self.args]

    def display(self) -> str:
        """Shell-quoted rendering for logs and messages only."""
        return ' '.join(shlex.quote(part) for part in self.argv)

    def __str__(self) -> str:
        return self.display()
