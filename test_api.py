#!/usr/bin/env python3
"""
API Test Suite for the Docker Service Manager

Exercises the Flask routes through the test client with a controller whose
executor is mocked.

Usage:
  pytest test_api.py
"""

import os
import sys
import unittest
from unittest.mock import patch, MagicMock

from docker_svcman.api import routes, server
from docker_svcman.core.catalog import ServiceCatalog
from docker_svcman.core.controller import ServiceController
from docker_svcman.core.errors import ExecutionFault
from docker_svcman.core.executor import RuntimeExecutor
from docker_svcman.models.outcome import ServiceOutcome


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        self.executor = MagicMock(spec=RuntimeExecutor)
        self.executor.execute.return_value = ServiceOutcome.from_exit(0)
        self.controller = ServiceController(ServiceCatalog.default(), executor=self.executor)
        routes.initialize(service_controller=self.controller)
        routes.app.config['TESTING'] = True
        self.client = routes.app.test_client()

    def argvs(self):
        return [c.args[0].argv for c in self.executor.execute.call_args_list]


class TestServiceRoutes(ApiTestCase):
    """Catalog and lifecycle endpoints"""

    def test_list_services(self):
        response = self.client.get('/api/services')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [s['id'] for s in response.get_json()],
            ["web_server_1", "data_processor", "llm_model_a", "mongodb", "redis_cache"]
        )

    def test_get_service(self):
        response = self.client.get('/api/services/mongodb')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['image'], "mongo:latest")
        self.assertEqual(data["environment"], {"MONGO_INITDB_ROOT_USERNAME": "admin", "MONGO_INITDB_ROOT_PASSWORD": "password"})

    def test_get_unknown_service(self):
        response = self.client.get('/api/services/nonexistent')

        self.assertEqual(response.status_code, 404)
        self.assertIn("nonexistent", response.get_json()['error'])

    def test_start(self):
        response = self.client.post('/api/services/redis_cache/start')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertTrue(data['success'])
        self.assertEqual(data['status'], "succeeded")
        self.assertEqual(self.argvs()[0][:5], ["docker", "run", "-d", "--name", "redis_cache"])

    def test_start_unknown(self):
        response = self.client.post('/api/services/nonexistent/start')

        self.assertEqual(response.status_code, 404)
        self.executor.execute.assert_not_called()

    def test_start_failure(self):
        self.executor.execute.return_value = ServiceOutcome.from_exit(125, stderr="name already in use")

        response = self.client.post('/api/services/redis_cache/start')

        self.assertEqual(response.status_code, 500)
        data = response.get_json()
        self.assertFalse(data['success'])
        self.assertEqual(data['exit_code'], 125)
        self.assertEqual(data['stderr'], "name already in use")

    def test_start_fault(self):
        self.executor.execute.side_effect = ExecutionFault("'docker' was not found on PATH")

        response = self.client.post('/api/services/redis_cache/start')

        self.assertEqual(response.status_code, 500)
        data = response.get_json()
        self.assertEqual(data['status'], "fault")
        self.assertIsNone(data['exit_code'])

    def test_stop_defaults_to_remove(self):
        response = self.client.post('/api/services/mongodb/stop')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.argvs(), [["docker", "stop", "mongodb"], ["docker", "rm", "mongodb"]])
        self.assertEqual(len(response.get_json()['steps']), 2)

    def test_stop_keep_container(self):
        response = self.client.post('/api/services/mongodb/stop', json={'remove': False})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.argvs(), [["docker", "stop", "mongodb"]])

    def test_stop_of_many_unknown_names_keeps_no_locks(self):
        for i in range(500):
            response = self.client.post(f'/api/services/ghost{i}/stop')
            self.assertEqual(response.status_code, 200)

        self.assertEqual(self.controller._locks, {})

    def test_stop_invalid_body(self):
        for body in [{'remove': "yes"}, ["remove"]]:
            with self.subTest(body=body):
                response = self.client.post('/api/services/mongodb/stop', json=body)
                self.assertEqual(response.status_code, 400)
        self.executor.execute.assert_not_called()


class TestStatusRoute(ApiTestCase):

    def test_running(self):
        self.executor.execute.return_value = ServiceOutcome.from_exit(0, stdout="running\n")

        response = self.client.get('/api/services/redis_cache/status')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'id': "redis_cache", 'state': "running"})

    def test_not_created(self):
        self.executor.execute.return_value = ServiceOutcome.from_exit(1, stderr="No such object")

        response = self.client.get('/api/services/redis_cache/status')

        self.assertEqual(response.get_json()['state'], "not_created")

    def test_fault(self):
        self.executor.execute.side_effect = ExecutionFault("timed out")

        response = self.client.get('/api/services/redis_cache/status')

        self.assertEqual(response.status_code, 500)


class TestImageRoutes(ApiTestCase):

    def test_pull(self):
        response = self.client.post('/api/images/pull', json={'image': "nginx:latest"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.argvs(), [["docker", "pull", "nginx:latest"]])

    def test_pull_missing_image(self):
        for body in [{}, {'image': 42}, None]:
            with self.subTest(body=body):
                response = self.client.post('/api/images/pull', json=body)
                self.assertEqual(response.status_code, 400)
        self.executor.execute.assert_not_called()

    def test_pull_blank_image(self):
        response = self.client.post('/api/images/pull', json={'image': "   "})

        self.assertEqual(response.status_code, 400)
        self.executor.execute.assert_not_called()


class TestSystemRoutes(ApiTestCase):

    @patch('docker_svcman.api.routes.system.get_system_resources')
    def test_resources(self, mock_resources):
        mock_resources.return_value = {'cpu': {'percent': 5.0}}

        response = self.client.get('/api/system/resources')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'cpu': {'percent': 5.0}})

    def test_cleanup(self):
        response = self.client.post('/api/system/cleanup')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertTrue(data['success'])
        self.assertEqual(set(data["results"]), {"container", "image", "volume", "network"})

    def test_cleanup_partial_failure(self):
        self.executor.execute.side_effect = [
            ServiceOutcome.from_exit(0),
            ServiceOutcome.from_exit(1, stderr="image is in use"),
            ServiceOutcome.from_exit(0),
            ServiceOutcome.from_exit(0),
        ]

        response = self.client.post('/api/system/cleanup')

        self.assertEqual(response.status_code, 500)
        data = response.get_json()
        self.assertFalse(data['success'])
        self.assertFalse(data['results']['image']['success'])
        self.assertTrue(data['results']['network']['success'])


class TestServerEntryPoint(unittest.TestCase):
    """Settings handling of the api server main()"""

    @patch('docker_svcman.api.server.start_api_server')
    @patch('docker_svcman.api.server.configure_logging')
    def test_log_level_from_environment(self, mock_logging, mock_start):
        with patch.dict(os.environ, {"DOCKER_SVCMAN_LOG_LEVEL": "error"}), \
                patch.object(sys, 'argv', ['docker-svcman-api', '--port', '5050']):
            server.main()

        mock_logging.assert_called_once_with("ERROR")
        self.assertEqual(mock_start.call_args.kwargs['port'], 5050)

    @patch('docker_svcman.api.server.start_api_server')
    @patch('docker_svcman.api.server.configure_logging')
    def test_debug_flag_overrides_environment(self, mock_logging, mock_start):
        with patch.dict(os.environ, {"DOCKER_SVCMAN_LOG_LEVEL": "error"}), \
                patch.object(sys, 'argv', ['docker-svcman-api', '--debug']):
            server.main()

        mock_logging.assert_called_once_with("DEBUG")
        self.assertTrue(mock_start.call_args.kwargs['debug'])


if __name__ == "__main__":
    unittest.main()
