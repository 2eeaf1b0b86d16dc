"""
Tests for the registry session.
"""
from __future__ import annotations

import pytest

from charthost.errors import AuthError
from charthost.storage.uri import OciReference


class TestRegistrySession:

    def test_login_once_per_host(self, session, fake_registry):
        session.login("oci://reg.example.com/charts", "alice", "pw")
        session.login("oci://reg.example.com/other", "alice", "pw")

        assert fake_registry.logins == [("reg.example.com", "alice")]
        assert session.is_logged_in("oci://reg.example.com/anything")

    def test_separate_hosts_log_in_separately(self, session, fake_registry):
        session.login("oci://a.example.com", "alice", "pw")
        session.login("oci://b.example.com", "bob", "pw")

        assert [host for host, _ in fake_registry.logins] == ["a.example.com", "b.example.com"]

    def test_failed_login_is_not_remembered(self, session, fake_registry):
        fake_registry.reject_logins.add("reg.example.com")

        with pytest.raises(AuthError):
            session.login("oci://reg.example.com", "alice", "bad")
        assert not session.is_logged_in("oci://reg.example.com")

        fake_registry.reject_logins.clear()
        session.login("oci://reg.example.com", "alice", "good")
        assert session.is_logged_in("oci://reg.example.com")

    def test_pull_uses_authenticated_client(self, session, fake_registry):
        fake_registry.require_login("reg.example.com", "alice", "pw")
        fake_registry.add_chart("reg.example.com/charts/mychart:1.0.0", b"chart")
        ref = OciReference("reg.example.com", "charts/mychart", "1.0.0")

        session.login("oci://reg.example.com/charts", "alice", "pw")

        assert session.pull(ref) == b"chart"

    @pytest.mark.parametrize("username,password", [("alice", ""), ("", "pw")])
    def test_partial_credentials_rejected_without_client_call(self, session, fake_registry, username, password):
        with pytest.raises(AuthError, match="both required"):
            session.login("oci://reg.example.com", username, password)
        assert fake_registry.logins == []
        assert not session.is_logged_in("oci://reg.example.com")

    def test_same_host_different_credentials_logs_in_again(self, session, fake_registry):
        session.login("oci://reg.example.com/team-a", "alice", "pw")
        session.login("oci://reg.example.com/team-b", "bob", "pw")
        session.login("oci://reg.example.com/team-b", "bob", "pw")

        assert fake_registry.logins == [("reg.example.com", "alice"), ("reg.example.com", "bob")]
