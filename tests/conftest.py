"""Shared pytest fixtures for the Odoo setup generator test suite.

Provides reusable fixtures for:
- A fully valid set of deployment parameters and a factory for variants
- Artifact rendering helpers
- A fake archive packager that records what it was asked to compress
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

import pytest

from odoo_setup.config import ConfigModel
from odoo_setup.renderer import ArtifactRenderer, as_mapping


# ---------------------------------------------------------------------------
# Deployment parameters
# ---------------------------------------------------------------------------

@pytest.fixture
def valid_params() -> dict[str, Any]:
    """Parameters that satisfy every validation rule."""
    return {
        "project_name": "acme-erp",
        "odoo_version": "17.0",
        "http_port": 8069,
        "chat_port": 8072,
        "domain": "",
        "db_name": "acme",
        "db_user": "acme_user",
        "db_password": "Db-Passw0rd!xyz",
        "admin_password": "Adm1n#Secret-42",
        "enable_postgres_port": False,
        "workers": 2,
        "cron_threads": 1,
        "memory_limit": 2,
        "log_level": "info",
        "enable_redis": False,
        "enable_nginx": False,
    }


@pytest.fixture
def valid_config(valid_params: dict[str, Any]) -> ConfigModel:
    return ConfigModel(**valid_params)


@pytest.fixture
def make_config(valid_params: dict[str, Any]) -> Callable[..., ConfigModel]:
    """Factory: a valid config with selected fields overridden."""

    def _make(**overrides: Any) -> ConfigModel:
        return ConfigModel(**{**valid_params, **overrides})

    return _make


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

@pytest.fixture
def artifact_renderer() -> ArtifactRenderer:
    return ArtifactRenderer()


@pytest.fixture
def render_bundle(artifact_renderer: ArtifactRenderer) -> Callable[[ConfigModel], dict[str, str]]:
    """Render a config into a ``{path: content}`` mapping."""

    def _render(config: ConfigModel) -> dict[str, str]:
        return as_mapping(artifact_renderer.render_all(config))

    return _render


# ---------------------------------------------------------------------------
# Packaging
# ---------------------------------------------------------------------------

class FakePackager:
    """Packager double that records its input and returns a fixed payload."""

    def __init__(self, payload: bytes = b"fake-archive", error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[dict[str, bytes]] = []

    def compress(self, files: Mapping[str, bytes]) -> bytes:
        self.calls.append(dict(files))
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def fake_packager() -> FakePackager:
    return FakePackager()


@pytest.fixture
def failing_packager() -> FakePackager:
    return FakePackager(error=RuntimeError("zip backend unavailable"))
