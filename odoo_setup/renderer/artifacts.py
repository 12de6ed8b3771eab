"""Rendering of every artifact in the deployment bundle.

Each artifact kind has its own template and its own render method on
:class:`ArtifactRenderer`.  All of them draw from the context returned by
:func:`build_context`, which is computed from a single ``ConfigModel``; that
shared context is what keeps ports, names, passwords and feature flags in
agreement across files.

Renderers do not validate.  They must only be handed a model that already
passed :func:`odoo_setup.validator.validate`.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from ..config import DEFAULT_SECRET_LENGTH, ConfigModel
from ..utils import write_text_file
from .templates import TemplateRenderer

# Artifact paths, relative to the project root
COMPOSE_PATH = "docker-compose.yml"
ENV_PATH = ".env"
ODOO_CONF_PATH = "config/odoo.conf"
SETUP_SCRIPT_PATH = "setup.sh"
GITIGNORE_PATH = ".gitignore"
NGINX_CONF_PATH = "nginx/nginx.conf"

# Ports inside the containers; only the host side is configurable
ODOO_HTTP_PORT = 8069
ODOO_CHAT_PORT = 8072
POSTGRES_PORT = 5432
REDIS_PORT = 6379

LONGPOLLING_PATH = "/longpolling"
STATIC_PATH_PATTERN = "/web/static/"

BASE_DIRECTORIES: tuple[str, ...] = ("config", "logs", "addons")
NGINX_DIRECTORIES: tuple[str, ...] = ("nginx", "nginx/ssl")


class GeneratedArtifact(BaseModel):
    """One rendered file of the bundle."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str

    @property
    def executable(self) -> bool:
        return self.path.endswith(".sh")


# ---------------------------------------------------------------------------
# Context building
# ---------------------------------------------------------------------------


def build_context(config: ConfigModel, secret_length: int = DEFAULT_SECRET_LENGTH) -> dict[str, Any]:
    """Build the Jinja2 template context shared by every artifact."""
    directories = list(BASE_DIRECTORIES)
    if config.enable_nginx:
        directories.extend(NGINX_DIRECTORIES)

    return {
        "project_name": config.project_name,
        "network_name": f"{config.project_name}_network",
        "odoo_version": config.odoo_version,
        "http_port": config.http_port,
        "chat_port": config.chat_port,
        "server_name": config.server_name,
        "access_url": config.access_url,
        "db_name": config.db_name,
        "db_user": config.db_user,
        "db_password": config.db_password,
        "admin_password": config.admin_password,
        "db_filter": f"^{re.escape(config.db_name)}$",
        "enable_postgres_port": config.enable_postgres_port,
        "workers": config.workers,
        "cron_threads": config.cron_threads,
        "memory_limit": config.memory_limit,
        "memory_reservation": config.memory_reservation_gb,
        "memory_hard_bytes": config.memory_hard_bytes,
        "memory_soft_bytes": config.memory_soft_bytes,
        "log_level": config.log_level,
        "enable_redis": config.enable_redis,
        "enable_nginx": config.enable_nginx,
        "odoo_http_port": ODOO_HTTP_PORT,
        "odoo_chat_port": ODOO_CHAT_PORT,
        "postgres_port": POSTGRES_PORT,
        "redis_port": REDIS_PORT,
        "longpolling_path": LONGPOLLING_PATH,
        "static_path_pattern": STATIC_PATH_PATTERN,
        "setup_directories": directories,
        "secret_length": secret_length,
    }


# ---------------------------------------------------------------------------
# ArtifactRenderer
# ---------------------------------------------------------------------------


class ArtifactRenderer:
    """Renders the Odoo deployment bundle from a ``ConfigModel``."""

    # Artifact path -> template name, in bundle order
    TEMPLATES: dict[str, str] = {
        COMPOSE_PATH: "docker-compose.yml.j2",
        ENV_PATH: "env.j2",
        ODOO_CONF_PATH: "odoo.conf.j2",
        SETUP_SCRIPT_PATH: "setup.sh.j2",
        GITIGNORE_PATH: "gitignore.j2",
        NGINX_CONF_PATH: "nginx.conf.j2",
    }

    def __init__(
        self,
        renderer: TemplateRenderer | None = None,
        secret_length: int = DEFAULT_SECRET_LENGTH,
    ) -> None:
        self.renderer = renderer or TemplateRenderer()
        self.secret_length = secret_length

    def _render(self, path: str, config: ConfigModel) -> str:
        context = build_context(config, self.secret_length)
        return self.renderer.render(self.TEMPLATES[path], context)

    # -- One method per artifact kind --------------------------------------

    def render_docker_compose(self, config: ConfigModel) -> str:
        return self._render(COMPOSE_PATH, config)

    def render_env_file(self, config: ConfigModel) -> str:
        return self._render(ENV_PATH, config)

    def render_odoo_conf(self, config: ConfigModel) -> str:
        return self._render(ODOO_CONF_PATH, config)

    def render_setup_script(self, config: ConfigModel) -> str:
        return self._render(SETUP_SCRIPT_PATH, config)

    def render_nginx_conf(self, config: ConfigModel) -> str:
        """Reverse-proxy config; only part of the bundle when nginx is enabled."""
        return self._render(NGINX_CONF_PATH, config)

    def render_gitignore(self) -> str:
        """The ignore file does not depend on the configuration."""
        return self.renderer.render(self.TEMPLATES[GITIGNORE_PATH], {})

    # -- Whole bundle ------------------------------------------------------

    def render_all(self, config: ConfigModel) -> list[GeneratedArtifact]:
        """Render every artifact that belongs in the bundle for *config*.

        Returns:
            Artifacts in bundle order.  ``nginx/nginx.conf`` is present only
            when ``enable_nginx`` is set.
        """
        artifacts = [
            GeneratedArtifact(path=COMPOSE_PATH, content=self.render_docker_compose(config)),
            GeneratedArtifact(path=ENV_PATH, content=self.render_env_file(config)),
            GeneratedArtifact(path=ODOO_CONF_PATH, content=self.render_odoo_conf(config)),
            GeneratedArtifact(path=SETUP_SCRIPT_PATH, content=self.render_setup_script(config)),
            GeneratedArtifact(path=GITIGNORE_PATH, content=self.render_gitignore()),
        ]
        if config.enable_nginx:
            artifacts.append(
                GeneratedArtifact(path=NGINX_CONF_PATH, content=self.render_nginx_conf(config))
            )
        return artifacts


def as_mapping(artifacts: list[GeneratedArtifact]) -> dict[str, str]:
    """Return ``{path: content}`` preserving bundle order."""
    return {artifact.path: artifact.content for artifact in artifacts}


async def write_artifacts(artifacts: list[GeneratedArtifact], root: str | Path) -> list[Path]:
    """Write rendered artifacts below *root*; shell scripts are made executable.

    Returns:
        List of written file paths.
    """
    base = Path(root)
    written: list[Path] = []
    for artifact in artifacts:
        out = base / artifact.path
        await asyncio.to_thread(
            write_text_file, out, artifact.content, executable=artifact.executable
        )
        written.append(out)
    return written
