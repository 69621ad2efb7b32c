"""
Rollback - undo the artifacts of a (partial) run for a host.

After a failed run only what that run created is removed: the paths it
recorded, and the hosts line it appended. Without a record (the
--rollback command) every artifact a run can create for the host is
removed.

Every removal tolerates a missing target, so a rollback can run twice in
a row.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from vhost.config import ProvisionPaths, Settings
from vhost.logging import VhostLogger, get_vhost_logger
from vhost.resources.hosts import HostsFileStore
from vhost.resources.sites import SiteRegistry
from vhost.resources.webroot import WebRoot
from vhost.transport import Transport


@dataclass
class RollbackReport:
    """What a rollback touched."""
    hosts_backup: Optional[str] = None
    hosts_lines_removed: int = 0
    removed: List[str] = field(default_factory=list)


class Rollback:
    """
    Cleanup for one host.

    Example:
        # Everything a run may have created
        Rollback(paths, transport).run()

        # Only what a given run created
        Rollback(paths, transport, created=ctx.created, hosts_entry=ctx.hosts_entry).run()
    """

    def __init__(
        self,
        paths: ProvisionPaths,
        transport: Transport,
        settings: Optional[Settings] = None,
        reporter: Optional[VhostLogger] = None,
        hosts: Optional[HostsFileStore] = None,
        created: Optional[List[str]] = None,
        hosts_entry: Optional[str] = None,
    ):
        """
        Args:
            paths: Paths of the host
            transport: Where the removals run
            settings: Locations and names (default: Settings())
            reporter: Console reporter
            hosts: Hosts file store (default: built from paths)
            created: Paths created by a run, in creation order. None removes
                every artifact and cleans the hosts file.
            hosts_entry: Hosts line appended by the run (used with created)
        """
        self.paths = paths
        self.transport = transport
        self.settings = settings or Settings()
        self.reporter = reporter or get_vhost_logger(__name__)
        self.hosts = hosts or HostsFileStore(transport, paths.hosts_file, paths.hosts_backup_dir)
        self.created = created
        self.hosts_entry = hosts_entry

    @property
    def targets(self) -> List[str]:
        """Paths to remove, newest first."""
        if self.created is None:
            paths = self.paths
            return [paths.enabled_link, paths.config_file, paths.candidate_file, paths.web_root]
        return list(reversed(self.created))

    def run(self) -> RollbackReport:
        """Clean the hosts file if needed, then remove the targets."""
        report = RollbackReport()

        if self.created is None:
            self._clean_hosts(report)
        elif self.hosts_entry:
            self._remove_entry(report)

        registry = SiteRegistry(self.transport, self.settings)
        for path in self.targets:
            self.reporter.step(f"Removing {path}")
            if not self.transport.file_exists(path):
                self.reporter.skipped("Not present.")
                continue

            if path == self.paths.web_root:
                WebRoot(self.transport).remove(self.paths)
            else:
                registry.remove(path)
            report.removed.append(path)
            self.reporter.done()

        self.reporter.success(f"Rolled back {self.paths.host_name}")
        return report

    def _remove_entry(self, report: RollbackReport) -> None:
        self.reporter.step(f"Removing the line added to {self.paths.hosts_file}")
        report.hosts_backup = self.hosts.backup()
        if self.hosts.remove_entry(self.hosts_entry):
            report.hosts_lines_removed = 1
            self.reporter.done()
        else:
            self.reporter.skipped("Not present.")

    def _clean_hosts(self, report: RollbackReport) -> None:
        paths = self.paths

        self.reporter.step(f"Backing up {paths.hosts_file}")
        report.hosts_backup = self.hosts.backup()
        self.reporter.done(report.hosts_backup)

        self.reporter.step(f"Removing {paths.host_name} from {paths.hosts_file}")
        report.hosts_lines_removed = self.hosts.strip(paths.host_name)
        if report.hosts_lines_removed:
            self.reporter.done(f"Removed {report.hosts_lines_removed} line(s).")
        else:
            self.reporter.skipped("Not present.")
