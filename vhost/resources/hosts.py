"""
Hosts file store - backups, appends and removals in /etc/hosts.

Appends are deliberately not deduplicated: provisioning the same name
twice leaves two identical lines.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from vhost.config import LOCALHOST_IP
from vhost.logging import get_logger
from vhost.transport import Transport

logger = get_logger(__name__)

ENTRY_SEPARATOR = "\t\t"
BACKUP_PREFIX = "hosts."
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S-%f"


class HostsFileStore:
    """
    Access to a hosts file through a transport.

    Example:
        store = HostsFileStore(transport, "/etc/hosts", "/var/backups/nginx-vhost")
        store.backup()
        store.append("test.local")
    """

    def __init__(
        self,
        transport: Transport,
        hosts_file: str,
        backup_dir: str,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.transport = transport
        self.hosts_file = hosts_file
        self.backup_dir = backup_dir
        self.clock = clock or datetime.now

    def read(self) -> str:
        """Return the hosts file content ("" when the file is missing)."""
        if not self.transport.file_exists(self.hosts_file):
            return ""
        return self.transport.read_file(self.hosts_file).decode("utf-8")

    def lines(self) -> List[str]:
        return self.read().splitlines()

    def backup(self) -> str:
        """
        Copy the hosts file to a timestamped file in the backup directory.

        Returns:
            Path of the backup
        """
        output, code = self.transport.run_command(["mkdir", "-p", self.backup_dir])
        if code != 0:
            raise OSError(f"Could not create {self.backup_dir}: {output.strip()}")

        stamp = self.clock().strftime(TIMESTAMP_FORMAT)
        backup_path = str(Path(self.backup_dir) / f"{BACKUP_PREFIX}{stamp}")
        self.transport.write_file(backup_path, self.read().encode("utf-8"))
        logger.debug("backed up %s to %s", self.hosts_file, backup_path)
        return backup_path

    def backups(self) -> List[str]:
        """Backups made so far, oldest first."""
        output, code = self.transport.run_command(["ls", "-1", self.backup_dir])
        if code != 0:
            return []
        names = [n for n in output.split() if n.startswith(BACKUP_PREFIX)]
        return [str(Path(self.backup_dir) / n) for n in sorted(names)]

    def append(self, host_name: str, ip: str = LOCALHOST_IP) -> str:
        """
        Append a mapping line for host_name.

        Returns:
            The line that was appended (without newline)
        """
        entry = f"{ip}{ENTRY_SEPARATOR}{host_name}"
        current = self.read()
        prefix = "\n" if current and not current.endswith("\n") else ""
        self.transport.append_file(self.hosts_file, f"{prefix}{entry}\n".encode("utf-8"))
        return entry

    def entries(self, host_name: str) -> List[str]:
        """Lines mapping an address to host_name."""
        return [line for line in self.lines() if host_name in _names(line)]

    def strip(self, host_name: str) -> int:
        """
        Remove host_name from the file.

        Lines mapping only host_name are dropped; on lines carrying
        several names just host_name is removed. Other lines are kept
        byte for byte.

        Returns:
            Number of lines changed or removed
        """
        kept = []
        changed = 0

        for line in self.read().splitlines(keepends=True):
            names = _names(line)
            if host_name not in names:
                kept.append(line)
                continue

            changed += 1
            others = [n for n in names if n != host_name]
            if others:
                address = line.split()[0]
                comment = _comment(line)
                rebuilt = " ".join([address] + others)
                kept.append(f"{rebuilt} {comment}\n" if comment else f"{rebuilt}\n")

        if changed:
            self.transport.write_file(self.hosts_file, "".join(kept).encode("utf-8"))
        return changed

    def remove_entry(self, entry: str) -> bool:
        """
        Remove the last line equal to entry, as returned by append().

        Returns:
            False when no such line exists
        """
        lines = self.read().splitlines(keepends=True)
        for index in range(len(lines) - 1, -1, -1):
            if lines[index].rstrip("\n") == entry:
                del lines[index]
                self.transport.write_file(self.hosts_file, "".join(lines).encode("utf-8"))
                return True
        return False


def _names(line: str) -> List[str]:
    """Host names on a hosts line (empty for blanks and comments)."""
    body = line.split("#", 1)[0].split()
    return body[1:] if len(body) > 1 else []


def _comment(line: str) -> str:
    if "#" not in line:
        return ""
    return "#" + line.split("#", 1)[1].rstrip("\n")
