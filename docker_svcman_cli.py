#!/usr/bin/env python3
"""
Docker Service Manager CLI

Console tool for starting, stopping and pulling containerized services.
"""

import sys
from docker_svcman.cli.commands import app


if __name__ == '__main__':
    # With no arguments, open the interactive menu like the console tool always has
    if len(sys.argv) == 1:
        sys.argv.append('interactive')
    app()
