"""
Tests for URL helpers shared by the index cache, resolver and fetcher.
"""
from __future__ import annotations

import pytest

from charthost.errors import InvalidURL
from charthost.storage.uri import (
    OciReference,
    is_absolute_url,
    join_repo_url,
    mirror_name_for,
    oci_reference,
    registry_hostname,
    url_basename,
    validate_http_url,
)


class TestMirrorName:

    @pytest.mark.parametrize("url,expected", [
        ("https://charts.example.com/stable", "stable"),
        ("https://charts.example.com/stable/", "stable"),
        ("https://charts.example.com/a/b/incubator", "incubator"),
        ("https://charts.example.com", "charts.example.com"),
        ("https://charts.example.com/", "charts.example.com"),
        ("https://charts.example.com:8443", "charts.example.com"),
    ])
    def test_derivation(self, url, expected):
        assert mirror_name_for(url) == expected

    @pytest.mark.parametrize("url", ["", "https://charts.example.com/..", "https://h/a\\b"])
    def test_unusable_url(self, url):
        with pytest.raises(InvalidURL, match="cannot derive"):
            mirror_name_for(url)


class TestValidateHttpUrl:

    @pytest.mark.parametrize("url", [
        "https://charts.example.com/index.yaml",
        "http://localhost:8080/charts/a-1.0.0.tgz",
        "HTTPS://charts.example.com/x.tgz",
    ])
    def test_accepts_http_and_https(self, url):
        assert validate_http_url(url) == url

    @pytest.mark.parametrize("url", [
        "ftp://charts.example.com/a.tgz",
        "file:///etc/passwd",
        "oci://reg.example.com/a",
        "a-1.0.0.tgz",
    ])
    def test_rejects_other_schemes(self, url):
        with pytest.raises(InvalidURL, match="scheme must be http or https"):
            validate_http_url(url)

    def test_rejects_missing_host(self):
        with pytest.raises(InvalidURL, match="missing host"):
            validate_http_url("https:///index.yaml")


class TestJoinRepoUrl:

    @pytest.mark.parametrize("repo", ["https://h/r", "https://h/r/"])
    @pytest.mark.parametrize("path", ["a-1.0.0.tgz", "/a-1.0.0.tgz"])
    def test_exactly_one_slash(self, repo, path):
        assert join_repo_url(repo, path) == "https://h/r/a-1.0.0.tgz"

    def test_nested_path(self):
        assert join_repo_url("https://h/r", "charts/a-1.0.0.tgz") == "https://h/r/charts/a-1.0.0.tgz"


class TestIsAbsoluteUrl:

    @pytest.mark.parametrize("url", ["https://h/a.tgz", "ftp://h/a.tgz", "file:///a.tgz"])
    def test_absolute(self, url):
        assert is_absolute_url(url)

    @pytest.mark.parametrize("url", ["a.tgz", "charts/a.tgz", "/a.tgz", "chart:1.0.tgz"])
    def test_relative(self, url):
        assert not is_absolute_url(url)


class TestUrlBasename:

    def test_last_segment(self):
        assert url_basename("https://h/r/charts/mychart-1.0.0.tgz") == "mychart-1.0.0.tgz"

    def test_ignores_query(self):
        assert url_basename("https://h/mychart-1.0.0.tgz?token=abc") == "mychart-1.0.0.tgz"

    def test_unquotes(self):
        assert url_basename("https://h/my%20chart.tgz") == "my chart.tgz"

    @pytest.mark.parametrize("url", ["https://h/", "https://h", "https://h/r/.."])
    def test_no_file_name(self, url):
        with pytest.raises(InvalidURL, match="no file name"):
            url_basename(url)


class TestOciReference:

    def test_with_path(self):
        ref = oci_reference("oci://reg.example.com/charts", "mychart", "1.0.0")
        assert ref == OciReference("reg.example.com", "charts/mychart", "1.0.0")
        assert ref.target == "reg.example.com/charts/mychart:1.0.0"
        assert str(ref) == ref.target

    def test_host_only(self):
        ref = oci_reference("oci://reg", "mychart", "1.0.0")
        assert ref.target == "reg/mychart:1.0.0"

    def test_trailing_slash_and_port(self):
        ref = oci_reference("oci://localhost:5000/a/b/", "c", "0.1.0")
        assert ref.hostname == "localhost:5000"
        assert ref.repository == "a/b/c"

    def test_missing_host(self):
        with pytest.raises(InvalidURL):
            oci_reference("oci://", "c", "1.0.0")


class TestRegistryHostname:

    @pytest.mark.parametrize("url,expected", [
        ("oci://reg.example.com/charts", "reg.example.com"),
        ("oci://localhost:5000", "localhost:5000"),
        ("reg.example.com/x", "reg.example.com"),
    ])
    def test_hostname(self, url, expected):
        assert registry_hostname(url) == expected
