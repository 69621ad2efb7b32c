"""
Local transport - run commands on local machine.
"""

import os
import subprocess
from pathlib import Path
from typing import Tuple

from vhost.logging import get_logger
from vhost.transport.base import Transport

logger = get_logger(__name__)

# Exit status a shell reports for an unknown command
COMMAND_NOT_FOUND = 127


class LocalTransport(Transport):
    """
    Local transport for running commands on the local machine.

    Uses subprocess for command execution.
    """

    def run_command(self, args: list) -> Tuple[str, int]:
        """
        Run command from list of arguments (no shell).

        Args:
            args: Command and arguments as list

        Returns:
            Tuple of (output, exit_code)
        """
        logger.debug("$ %s", " ".join(str(a) for a in args))
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            logger.debug("exit=%d (%s)", COMMAND_NOT_FOUND, e)
            return str(e), COMMAND_NOT_FOUND

        logger.debug("exit=%d", result.returncode)
        return result.stdout + result.stderr, result.returncode

    def write_file(self, path: str, content: bytes) -> None:
        """Write content to file."""
        Path(path).write_bytes(content)

    def append_file(self, path: str, content: bytes) -> None:
        """Append content to file."""
        with open(path, "ab") as f:
            f.write(content)

    def read_file(self, path: str) -> bytes:
        """Read file content."""
        return Path(path).read_bytes()

    def file_exists(self, path: str) -> bool:
        """Check if path exists (without following a final symlink)."""
        return os.path.lexists(path)

    def close(self) -> None:
        """No-op for local transport."""
        pass
