"""
API server for the Docker Service Manager.

This module provides the main entry point for starting the API server.
"""

import argparse
import logging
import sys

from docker_svcman.api.routes import app, initialize
from docker_svcman.core.errors import ServiceManagerError
from docker_svcman.core.settings import Settings, configure_logging


logger = logging.getLogger('docker_svcman.api')


def start_api_server(host: str = '127.0.0.1', port: int = 5000, debug: bool = False,
                     settings: Settings = None):
    """
    Start the API server.

    Args:
        host: Host to bind to
        port: Port to bind to
        debug: Whether to enable debug mode
        settings: Settings to build the controller from; read from the environment if omitted
    """
    initialize(settings=settings or Settings.from_env())

    # threaded: the controller serialises requests for the same service id
    app.run(host=host, port=port, debug=debug, threaded=True, use_reloader=False)


def main():
    """Main entry point for the API server."""
    parser = argparse.ArgumentParser(description='Docker Service Manager API Server')
    parser.add_argument('--host', default='127.0.0.1', help='Host to bind to')
    parser.add_argument('--port', type=int, default=5000, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')
    parser.add_argument('--catalog', help='YAML file with service definitions')
    parser.add_argument('--runtime', help='Container runtime executable')

    args = parser.parse_args()

    try:
        settings = Settings.from_env()
    except ServiceManagerError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.catalog:
        settings.catalog_path = args.catalog
    if args.runtime:
        settings.runtime = args.runtime
    if args.debug:
        settings.log_level = "DEBUG"

    configure_logging(settings.log_level)

    try:
        start_api_server(host=args.host, port=args.port, debug=args.debug, settings=settings)
    except ServiceManagerError as e:
        logger.error(f"Failed to start API server: {str(e)}")
        sys.exit(2)
    except KeyboardInterrupt:
        print("Shutting down API server...")
        sys.exit(0)


if __name__ == '__main__':
    main()
