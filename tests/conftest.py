"""
Shared fixtures.

Provisioning runs against a temporary directory tree: filesystem commands
(mkdir, ln, mv, chown, find, rm) really run, while service and version
commands are answered from a table.
"""

import grp
import io
import os
import pwd
from pathlib import Path

import httpx
import pytest
from rich.console import Console

from vhost.config import Settings
from vhost.core.step import Platform
from vhost.logging import VhostLogger
from vhost.transport import LocalTransport

# Programs that must never reach the real machine during tests
SIMULATED = {"php", "nginx", "pidof", "service", "systemctl"}


class FakeTransport(LocalTransport):
    """
    LocalTransport with canned answers for service and version commands.

    Answers are looked up by full command line first, then by program.
    """

    def __init__(self):
        self.calls = []
        self.closed = 0
        self.responses = {
            "php": ("", 127),
            "nginx": ("nginx version: nginx/1.24.0 (Ubuntu)\n", 0),
            "pidof": ("", 1),
            "service": ("", 0),
            "systemctl": ("", 0),
        }

    def respond(self, command: str, output: str = "", code: int = 0) -> None:
        self.responses[command] = (output, code)

    def commands(self, program: str):
        return [c for c in self.calls if c[0] == program]

    def run_command(self, args: list):
        args = [str(a) for a in args]
        self.calls.append(args)

        line = " ".join(args)
        if line in self.responses:
            return self.responses[line]
        if args[0] in SIMULATED:
            return self.responses.get(args[0], ("", 127))
        return super().run_command(args)

    def close(self) -> None:
        self.closed += 1


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def current_user():
    return pwd.getpwuid(os.getuid()).pw_name


@pytest.fixture
def current_group():
    return grp.getgrgid(os.getgid()).gr_name


@pytest.fixture
def settings(tmp_path, current_user, current_group):
    """Settings pointing every location into tmp_path, with the layout created."""
    nginx_dir = tmp_path / "nginx"
    (nginx_dir / "sites-available").mkdir(parents=True)
    (nginx_dir / "sites-enabled").mkdir(parents=True)
    (tmp_path / "www").mkdir()
    (tmp_path / "etc").mkdir()
    (tmp_path / "etc" / "hosts").write_text("")

    return Settings(
        nginx_dir=str(nginx_dir),
        web_root_base=str(tmp_path / "www"),
        hosts_file=str(tmp_path / "etc" / "hosts"),
        hosts_backup_dir=str(tmp_path / "backups"),
        web_group=current_group,
        owner=current_user,
    )


@pytest.fixture
def linux():
    return Platform(system="Linux", distro="ubuntu", version="24.04", arch="x86_64")


@pytest.fixture
def reporter():
    """Reporter writing to a buffer instead of the terminal."""
    return VhostLogger("tests", out=Console(file=io.StringIO(), width=200))


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr("vhost.steps.os.geteuid", lambda: 0)


def serve_web_roots(web_root_base: str) -> httpx.Client:
    """An httpx client answering like Nginx serving <base>/<host>/index.html."""

    def handler(request: httpx.Request) -> httpx.Response:
        index = Path(web_root_base) / request.url.host / "index.html"
        if not index.is_file():
            return httpx.Response(404, text="<html>404 Not Found</html>\n")
        return httpx.Response(200, text=index.read_text())

    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def http_client(settings):
    with serve_web_roots(settings.web_root_base) as client:
        yield client
