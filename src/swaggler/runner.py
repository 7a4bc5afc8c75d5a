"""Runs a curl command to capture an example response."""

import json
import logging
import shlex
import subprocess
from typing import Any

from swaggler.errors import ExecutionError, MalformedInputError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def run_curl(command: str, timeout: float = DEFAULT_TIMEOUT) -> Any:
    """Execute ``command`` without a shell and return its stdout parsed as JSON.

    Line continuations are joined before the command is split into arguments.
    """
    try:
        args = shlex.split(command.replace("\\\n", " "))
    except ValueError as e:
        raise MalformedInputError(f"Cannot split curl command: {e}") from e

    logger.debug("Running %s", args[0] if args else "<empty>")
    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise ExecutionError(
            f"curl command timed out after {timeout:g}s", details={"timeout": timeout}
        ) from e
    except OSError as e:
        raise ExecutionError(f"Failed to execute curl command: {e}") from e

    if result.stderr:
        logger.warning("curl wrote to stderr: %s", result.stderr.strip())
    if result.returncode != 0:
        raise ExecutionError(
            f"Failed to execute curl command: exit status {result.returncode}",
            details={"returncode": result.returncode, "stderr": result.stderr.strip()},
        )

    return parse_response(result.stdout)


def parse_response(text: str) -> Any:
    """Parse a JSON response body."""
    try:
        return json.loads(text)
    except ValueError as e:
        raise MalformedInputError("Invalid JSON response provided", details={"cause": str(e)}) from e
