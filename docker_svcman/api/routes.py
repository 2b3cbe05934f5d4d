"""
API routes for the Docker Service Manager.

This module provides the REST API endpoints for managing catalog services.
"""

import logging

from flask import Flask, request, jsonify

from docker_svcman.core import system
from docker_svcman.core.controller import ServiceController
from docker_svcman.core.errors import InvalidArgument, UnknownService
from docker_svcman.core.settings import Settings, build_controller
from docker_svcman.models.outcome import ServiceOutcome


logger = logging.getLogger('docker_svcman.api')

app = Flask(__name__)

# Global instance
controller: ServiceController = None


def initialize(settings: Settings = None, service_controller: ServiceController = None):
    """Initialize the API with a service controller."""
    global controller

    controller = service_controller or build_controller(settings)
    logger.info(f"API initialized with {len(controller.catalog)} services")


def outcome_response(outcome: ServiceOutcome):
    """200 with the outcome on success, 500 with the outcome on failure."""
    return jsonify(outcome.to_dict()), 200 if outcome.success else 500


def request_body() -> dict:
    """The JSON object sent with the request, or an empty one."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgument("Request body must be a JSON object")
    return data


@app.errorhandler(UnknownService)
def handle_unknown_service(e):
    return jsonify({'error': str(e)}), 404


@app.errorhandler(InvalidArgument)
def handle_invalid_argument(e):
    return jsonify({'error': str(e)}), 400


@app.route('/api/services', methods=['GET'])
def list_services():
    """List catalog services."""
    return jsonify([service.to_dict() for service in controller.list_catalog()])


@app.route('/api/services/<service_id>', methods=['GET'])
def get_service(service_id):
    """Get a service definition by ID."""
    return jsonify(controller.catalog.lookup(service_id).to_dict())


@app.route('/api/services/<service_id>/start', methods=['POST'])
def start_service(service_id):
    """Start a service."""
    return outcome_response(controller.start(service_id))


@app.route('/api/services/<service_id>/stop', methods=['POST'])
def stop_service(service_id):
    """Stop a service, removing its container unless told otherwise."""
    data = request_body()
    remove = data.get('remove', True)
    if not isinstance(remove, bool):
        raise InvalidArgument("'remove' must be a boolean")

    return outcome_response(controller.stop(service_id, remove=remove))


@app.route('/api/services/<service_id>/status', methods=['GET'])
def service_status(service_id):
    """Get the live container state of a service."""
    outcome = controller.status(service_id)
    if outcome.is_fault:
        return jsonify(outcome.to_dict()), 500

    state = outcome.stdout.strip() if outcome.success else 'not_created'
    return jsonify({'id': service_id, 'state': state})


@app.route('/api/images/pull', methods=['POST'])
def pull_image():
    """Pull an image."""
    data = request_body()
    image = data.get('image')
    if not isinstance(image, str):
        raise InvalidArgument("Missing required field: image")

    return outcome_response(controller.pull_image(image))


@app.route('/api/system/resources', methods=['GET'])
def system_resources():
    """Get host resource usage."""
    return jsonify(system.get_system_resources())


@app.route('/api/system/cleanup', methods=['POST'])
def system_cleanup():
    """Prune unused containers, images, volumes and networks."""
    outcomes = system.cleanup(controller)
    results = {
        target.value: outcome.to_dict()
        for target, outcome in zip(system.PRUNE_ORDER, outcomes)
    }
    success = all(outcome.success for outcome in outcomes)
    return jsonify({'success': success, 'results': results}), 200 if success else 500
