#!/usr/bin/env python3
"""
Runtime Executor Test Suite

Runs the executor against a patched subprocess.run, so no container
runtime is needed.

Usage:
  pytest test_executor.py
"""

import shutil
import subprocess
import unittest
from unittest.mock import patch, MagicMock

import pytest

from docker_svcman.core.errors import ExecutionFault, ExecutionTimeout
from docker_svcman.core.executor import DEFAULT_TIMEOUT, RuntimeExecutor
from docker_svcman.models.command import CommandDescription
from docker_svcman.models.enums import OutcomeStatus


def completed(returncode=0, stdout="", stderr=""):
    process = MagicMock()
    process.returncode = returncode
    process.stdout = stdout
    process.stderr = stderr
    return process


class TestRuntimeExecutor(unittest.TestCase):
    """Test cases for RuntimeExecutor.execute"""

    def setUp(self):
        self.command = CommandDescription("docker", ("pull", "nginx:latest"))

    @patch('subprocess.run')
    def test_success(self, mock_run):
        mock_run.return_value = completed(0, "Status: Downloaded newer image\n", "")

        outcome = RuntimeExecutor().execute(self.command)

        self.assertTrue(outcome.success)
        self.assertEqual(outcome.exit_code, 0)
        self.assertEqual(outcome.status, OutcomeStatus.SUCCEEDED)
        self.assertEqual(outcome.stdout, "Status: Downloaded newer image\n")
        self.assertEqual(outcome.stderr, "")
        self.assertEqual(outcome.command, "docker pull nginx:latest")

    @patch('subprocess.run')
    def test_argv_without_shell(self, mock_run):
        mock_run.return_value = completed()

        RuntimeExecutor(timeout=30).execute(CommandDescription("docker", ("pull", "a; rm -rf /")))

        mock_run.assert_called_once_with(
            ["docker", "pull", "a; rm -rf /"],
            capture_output=True,
            text=True,
            check=False,
            timeout=30
        )
        self.assertNotIn('shell', mock_run.call_args.kwargs)

    @patch('subprocess.run')
    def test_non_zero_exit_is_an_outcome(self, mock_run):
        mock_run.return_value = completed(
            125, "", 'Conflict. The container name "/redis_cache" is already in use'
        )

        outcome = RuntimeExecutor().execute(self.command)

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.exit_code, 125)
        self.assertEqual(outcome.status, OutcomeStatus.FAILED)
        self.assertIn("already in use", outcome.stderr)
        self.assertIn("already in use", outcome.message)

    @patch('subprocess.run')
    def test_none_streams_become_empty_strings(self, mock_run):
        mock_run.return_value = completed(0, None, None)

        outcome = RuntimeExecutor().execute(self.command)

        self.assertEqual(outcome.stdout, "")
        self.assertEqual(outcome.stderr, "")

    @patch('subprocess.run')
    def test_missing_executable(self, mock_run):
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory", "docker")

        with self.assertRaises(ExecutionFault) as ctx:
            RuntimeExecutor().execute(self.command)

        self.assertEqual(ctx.exception.executable, "docker")
        self.assertNotIsInstance(ctx.exception, ExecutionTimeout)

    @patch('subprocess.run')
    def test_permission_denied(self, mock_run):
        mock_run.side_effect = PermissionError(13, "Permission denied")

        with pytest.raises(ExecutionFault, match="Permission denied"):
            RuntimeExecutor().execute(self.command)

    @patch('subprocess.run')
    def test_other_os_error(self, mock_run):
        mock_run.side_effect = OSError(8, "Exec format error")

        with pytest.raises(ExecutionFault):
            RuntimeExecutor().execute(self.command)

    @patch('subprocess.run')
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["docker"], timeout=5)

        with self.assertRaises(ExecutionTimeout) as ctx:
            RuntimeExecutor(timeout=5).execute(self.command)

        self.assertIsInstance(ctx.exception, ExecutionFault)
        self.assertEqual(ctx.exception.timeout, 5)

    def test_default_timeout(self):
        self.assertEqual(RuntimeExecutor().timeout, DEFAULT_TIMEOUT)

    @patch('subprocess.run')
    def test_zero_timeout_disables_limit(self, mock_run):
        mock_run.return_value = completed()

        RuntimeExecutor(timeout=0).execute(self.command)

        self.assertIsNone(mock_run.call_args.kwargs['timeout'])


@pytest.mark.integration
@pytest.mark.skipif(shutil.which("docker") is None, reason="docker is not installed")
def test_real_runtime_reports_client_version():
    outcome = RuntimeExecutor(timeout=30).execute(
        CommandDescription("docker", ("version", "--format", "{{.Client.Version}}"))
    )
    assert outcome.exit_code is not None
    assert outcome.stdout.strip()


if __name__ == "__main__":
    unittest.main()
