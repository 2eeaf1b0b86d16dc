"""
charthost - mirror Helm charts from OCI and legacy HTTP registries.

Given a declarative list of registries, charthost logs in, resolves each
chart and version to a download location, fetches it and writes it to a
local output directory.
"""
__version__ = "0.1.0"

__all__ = [
    "config",
    "errors",
    "settings",
    "session",
    "index_cache",
    "resolver",
    "fetcher",
    "orchestrator",
]
