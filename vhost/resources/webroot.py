"""
Web root - the document directory served for a host.

Creates the directory and a test page, then hands the tree to the
invoking user and the web group:
- directories: 2750 (rwxr-s---)
- files: 0640 (rw-r-----)
"""

from pathlib import Path

from vhost.config import ProvisionPaths
from vhost.errors import DependencyError, DirectoryExistsError, PermissionDeniedError
from vhost.logging import get_logger
from vhost.transport import Transport

logger = get_logger(__name__)

DIR_MODE = 0o2750
FILE_MODE = 0o640


def index_page(paths: ProvisionPaths) -> str:
    """
    Content of the test page.

    The first line is the bare host name; the reachability check
    compares it with the requested name.
    """
    return (
        f"{paths.host_name}\n"
        f"Vhost {paths.host_name} is setup.\n"
        f"Modify it under {paths.web_root}\n"
    )


class WebRoot:
    """Creates and removes host web roots through a transport."""

    def __init__(self, transport: Transport):
        self.transport = transport

    def provision(self, paths: ProvisionPaths, owner: str, group: str) -> str:
        """
        Create the web root, its index page, ownership and modes.

        Raises:
            DependencyError: The web root base (e.g. /var/www) is missing
            DirectoryExistsError: The web root already exists
            PermissionDeniedError: Ownership or modes could not be set
        """
        base = str(Path(paths.web_root).parent)
        if not self.transport.file_exists(base):
            raise DependencyError(
                f"Directory {base} does not exist. Are you sure Nginx is installed ?",
                paths=[base],
            )

        if self.transport.file_exists(paths.web_root):
            raise DirectoryExistsError(
                f"Directory {paths.web_root} already exists. "
                "Remove or rename it before running this script.",
                paths=[paths.web_root],
                hints=[f"sudo rm -r {paths.web_root}"],
            )

        self._run(["mkdir", "-p", paths.web_root], paths)
        self.transport.write_file(paths.index_file, index_page(paths).encode("utf-8"))

        self._run(["chown", "-R", f"{owner}:{group}", paths.web_root], paths)
        self._run(
            ["find", paths.web_root, "-type", "d", "-exec", "chmod", _octal(DIR_MODE), "{}", "+"],
            paths,
        )
        self._run(
            ["find", paths.web_root, "-type", "f", "-exec", "chmod", _octal(FILE_MODE), "{}", "+"],
            paths,
        )
        logger.debug("provisioned %s for %s:%s", paths.web_root, owner, group)
        return paths.web_root

    def remove(self, paths: ProvisionPaths) -> None:
        """Remove the web root recursively. A missing directory is ignored."""
        output, code = self.transport.run_command(["rm", "-rf", paths.web_root])
        if code != 0:
            raise OSError(f"Could not remove {paths.web_root}: {output.strip()}")

    def _run(self, args: list, paths: ProvisionPaths) -> None:
        output, code = self.transport.run_command(args)
        if code != 0:
            raise PermissionDeniedError(
                f"Command failed on {paths.web_root}: {' '.join(args)}\n{output.strip()}",
                paths=[paths.web_root],
                hints=[f"ls -ld {paths.web_root}", f"sudo rm -r {paths.web_root}"],
            )


def _octal(mode: int) -> str:
    return oct(mode)[2:]
