#!/usr/bin/env python3
"""
Docker Service Manager API Server

This script starts the HTTP API server for the Docker Service Manager.
"""

from docker_svcman.api.server import main


if __name__ == '__main__':
    main()
