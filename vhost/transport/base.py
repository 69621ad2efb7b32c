"""
Base transport interface.

Every system mutation made while provisioning goes through a Transport,
so tests can substitute a recording fake for the real machine.
"""

from abc import ABC, abstractmethod
from typing import Tuple


class Transport(ABC):
    """
    Abstract base class for command running and file operations.

    Implementations:
    - LocalTransport: Run commands on this machine
    """

    @abstractmethod
    def run_command(self, args: list) -> Tuple[str, int]:
        """
        Run a command from list of arguments (no shell).

        Args:
            args: Command and arguments as list

        Returns:
            Tuple of (output, exit_code). A missing executable
            yields exit code 127, like a shell would.

        Example:
            output, code = transport.run_command(["systemctl", "is-active", "nginx"])
        """
        pass

    @abstractmethod
    def write_file(self, path: str, content: bytes) -> None:
        """
        Write content to a file, replacing it.

        Raises:
            OSError: If write fails
        """
        pass

    @abstractmethod
    def append_file(self, path: str, content: bytes) -> None:
        """
        Append content to a file, creating it if needed.

        Raises:
            OSError: If write fails
        """
        pass

    @abstractmethod
    def read_file(self, path: str) -> bytes:
        """
        Read file content.

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        pass

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """
        Check if a path exists. Dangling symlinks count as existing.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release any resources held by the transport."""
        pass

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
