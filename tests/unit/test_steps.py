"""
Unit tests for the individual provisioning steps.
"""

import os

import httpx
import pytest

from vhost.config import HostRequest
from vhost.core import ProvisionContext
from vhost.errors import (
    DependencyError,
    PermissionDeniedError,
    ServiceReloadError,
    VerificationError,
)
from vhost.steps import (
    DetectDependencies,
    ProvisionWebRoot,
    ReloadWebServer,
    ValidatePreconditions,
    VerifyReachability,
    WriteConfig,
    default_steps,
    is_group_member,
)


@pytest.fixture
def ctx(settings, transport, linux):
    return ProvisionContext(HostRequest("test.local"), settings, transport, platform=linux)


def client_returning(status, text):
    return httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(status, text=text)))


class TestStepOrder:
    def test_default_order(self):
        assert [s.name for s in default_steps()] == [
            "validate-preconditions",
            "detect-dependencies",
            "write-config",
            "enable-site",
            "provision-web-root",
            "register-hosts-entry",
            "reload-web-server",
            "verify-reachability",
        ]

    def test_rollback_offered_from_write_config_on(self):
        offers = {s.name: s.offers_rollback for s in default_steps()}
        assert not offers["validate-preconditions"]
        assert not offers["detect-dependencies"]
        assert offers["write-config"]
        assert offers["verify-reachability"]


class TestValidatePreconditions:
    """Privilege and group checks."""

    def test_not_root(self, ctx, monkeypatch):
        monkeypatch.setattr("vhost.steps.os.geteuid", lambda: 1000)

        outcome = ValidatePreconditions().run(ctx)

        assert not outcome.succeeded
        assert isinstance(outcome.error, PermissionDeniedError)
        assert isinstance(outcome.error, PermissionError)

    def test_not_in_group(self, ctx, as_root):
        ctx.settings.web_group = "no-such-group-for-tests"

        outcome = ValidatePreconditions().run(ctx)

        assert not outcome.succeeded
        assert any("usermod" in hint for hint in outcome.error.hints)

    def test_root_and_member(self, ctx, as_root):
        assert ValidatePreconditions().run(ctx).succeeded

    def test_primary_group_counts(self, current_user, current_group):
        assert is_group_member(current_user, current_group)

    def test_unknown_user(self, current_group):
        assert not is_group_member("no-such-user-for-tests", current_group)


class TestDetectDependencies:
    """PHP and Nginx detection."""

    def test_nginx_missing_is_fatal(self, ctx, transport):
        transport.respond("nginx", "", 127)

        outcome = DetectDependencies().run(ctx)

        assert isinstance(outcome.error, DependencyError)

    def test_php_missing_is_not_fatal(self, ctx):
        outcome = DetectDependencies().run(ctx)

        assert outcome.succeeded
        assert ctx.nginx_version == "1.24.0"
        assert ctx.php_version is None
        assert not ctx.php_enabled

    def test_php_detected(self, ctx, transport):
        transport.respond("php", "8.3", 0)

        DetectDependencies().run(ctx)

        assert ctx.php_enabled
        assert "8.3" in DetectDependencies().run(ctx).message

    def test_keeps_known_platform(self, ctx, linux):
        DetectDependencies().run(ctx)
        assert ctx.platform is linux


class TestReloadWebServer:
    """Legacy stop, reload, active check."""

    def test_stops_running_legacy_server(self, ctx, transport):
        transport.respond("pidof", "42", 0)

        outcome = ReloadWebServer().run(ctx)

        assert outcome.succeeded
        assert ["service", "apache2", "stop"] in transport.calls
        assert "apache2 stopped" in outcome.message

    def test_legacy_not_running(self, ctx, transport):
        assert ReloadWebServer().run(ctx).succeeded
        assert transport.commands("service") == []

    def test_reload_failure(self, ctx, transport):
        transport.respond("systemctl reload-or-restart nginx.service", "failed", 1)

        outcome = ReloadWebServer().run(ctx)

        assert isinstance(outcome.error, ServiceReloadError)

    def test_inactive_after_reload(self, ctx, transport):
        transport.respond("systemctl is-active --quiet nginx.service", "", 3)

        outcome = ReloadWebServer().run(ctx)

        assert isinstance(outcome.error, ServiceReloadError)
        assert "not active" in outcome.message


class TestVerifyReachability:
    """HTTP probe of the new host."""

    def test_success(self, ctx):
        ctx.http_client = client_returning(200, "test.local\nVhost test.local is setup.\n")

        outcome = VerifyReachability().run(ctx)

        assert outcome.succeeded
        assert outcome.message == "HTTP/1.1 200 OK"
        assert ctx.response_body.startswith("test.local")

    def test_default_server_answered(self, ctx):
        ctx.http_client = client_returning(200, "<html>Welcome to nginx!</html>\n")

        outcome = VerifyReachability().run(ctx)

        assert isinstance(outcome.error, VerificationError)
        assert any("namei -l" in hint for hint in outcome.error.hints)
        assert any("error.log" in hint for hint in outcome.error.hints)

    def test_not_found(self, ctx):
        ctx.http_client = client_returning(404, "test.local\n")

        outcome = VerifyReachability().run(ctx)

        assert isinstance(outcome.error, VerificationError)
        assert "404" in outcome.message

    def test_connection_refused(self, ctx):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        ctx.http_client = httpx.Client(transport=httpx.MockTransport(refuse))

        outcome = VerifyReachability().run(ctx)

        assert isinstance(outcome.error, VerificationError)
        assert isinstance(outcome.error.__cause__, httpx.ConnectError)

    def test_requests_host_root(self, ctx):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, text="test.local\n")

        ctx.http_client = httpx.Client(transport=httpx.MockTransport(handler))
        VerifyReachability().run(ctx)

        assert seen == ["http://test.local/"]


class TestWebRootSteps:
    """Config, link and web root steps against the temporary tree."""

    def test_write_enable_provision(self, ctx):
        for step in default_steps()[2:5]:
            outcome = step.run(ctx)
            assert outcome.succeeded, outcome

        assert os.path.isfile(ctx.paths.config_file)
        assert os.path.islink(ctx.paths.enabled_link)
        assert os.path.isdir(ctx.paths.web_root)

    def test_records_created_paths(self, ctx):
        for step in default_steps()[2:6]:
            assert step.run(ctx).succeeded

        assert ctx.created == [ctx.paths.config_file, ctx.paths.enabled_link, ctx.paths.web_root]
        assert ctx.hosts_entry == "127.0.0.1\t\ttest.local"

    def test_existing_web_root_not_recorded(self, ctx):
        os.makedirs(ctx.paths.web_root)

        outcome = ProvisionWebRoot().run(ctx)

        assert not outcome.succeeded
        assert ctx.created == []

    def test_existing_config_not_recorded(self, ctx):
        with open(ctx.paths.config_file, "w") as f:
            f.write("server {}\n")

        assert not WriteConfig().run(ctx).succeeded
        assert ctx.created == []
