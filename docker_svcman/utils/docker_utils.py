"""
Runtime output helpers for the Docker Service Manager.
"""

import json
import logging
from typing import Any, Dict, List


logger = logging.getLogger('docker_svcman.utils')


def parse_json_lines(stdout: str) -> List[Dict[str, Any]]:
    """
    Parse ``--format '{{json .}}'`` output, one JSON object per line.

    Lines that are not valid JSON objects are skipped.

    Args:
        stdout: Raw runtime output

    Returns:
        List[Dict[str, Any]]: Parsed rows in output order
    """
    rows = []
    for line in (stdout or "").splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            row = json.loads(line)
        except json.JSONDecodeError:
            logger.debug(f"Skipping non-JSON runtime output line: {line[:80]}")
            continue
        if isinstance(row, dict):
            rows.append(row)
    return rows


def image_reference(row: Dict[str, Any]) -> str:
    """Render an ``images`` row as ``repository:tag``."""
    repository = row.get('Repository') or '<none>'
    tag = row.get('Tag') or '<none>'
    return f"{repository}:{tag}"
