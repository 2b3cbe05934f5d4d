"""
Runtime executor for the Docker Service Manager.

Runs a command description as a child process, without a shell, and
classifies the result.
"""

import logging
import subprocess
from typing import Optional

from docker_svcman.core.errors import ExecutionFault, ExecutionTimeout
from docker_svcman.models.command import CommandDescription
from docker_svcman.models.outcome import ServiceOutcome


logger = logging.getLogger('docker_svcman.executor')

DEFAULT_TIMEOUT = 300.0


class RuntimeExecutor:
    """
    Executes runtime invocations synchronously.

    A non-zero exit is returned as a failed outcome. Only a runtime that
    cannot be spawned, or that outlives the timeout, raises.
    """
    def __init__(self, timeout: Optional[float] = DEFAULT_TIMEOUT):
        # 0 or None means wait forever
        self.timeout = timeout or None

    def execute(self, command: CommandDescription) -> ServiceOutcome:
        """
        Run a command and capture its output.

        Args:
            command: The invocation to run

        Returns:
            ServiceOutcome: Exit code, stdout and stderr of the process

        Raises:
            ExecutionFault: If the executable cannot be found or started
            ExecutionTimeout: If the process does not finish in time
        """
        display = command.display()
        logger.debug(f"Executing: {display}")

        try:
            result = subprocess.run(
                command.argv,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            logger.error(f"Command timed out after {self.timeout}s: {display}")
            raise ExecutionTimeout(
                f"'{command.executable}' did not finish within {self.timeout} seconds",
                executable=command.executable,
                timeout=self.timeout
            ) from e
        except FileNotFoundError as e:
            logger.error(f"Runtime executable not found: {command.executable}")
            raise ExecutionFault(
                f"'{command.executable}' was not found. Is it installed and on PATH?",
                executable=command.executable
            ) from e
        except PermissionError as e:
            logger.error(f"Permission denied running {command.executable}")
            raise ExecutionFault(
                f"Permission denied running '{command.executable}'",
                executable=command.executable
            ) from e
        except OSError as e:
            logger.error(f"Failed to spawn {command.executable}: {str(e)}")
            raise ExecutionFault(
                f"Failed to run '{command.executable}': {str(e)}",
                executable=command.executable
            ) from e

        if result.returncode != 0:
            logger.warning(f"Command exited with code {result.returncode}: {display}")

        return ServiceOutcome.from_exit(
            result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            command=display
        )
