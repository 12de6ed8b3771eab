"""Archive layout and assembly.

The bundle is laid out under a single top-level folder named after the
project::

    <project>/
        docker-compose.yml  .env  .gitignore  setup.sh
        config/odoo.conf
        logs/README.md          (placeholder)
        addons/README.md        (placeholder)
        nginx/nginx.conf        (nginx only)
        nginx/ssl/README.md     (nginx only, placeholder)

Folders that no artifact targets receive a README placeholder so that the
archive never depends on empty-directory support.  Assembly is
all-or-nothing: a missing artifact raises :class:`AssemblyError` before
anything is packaged.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from ..config import ConfigModel
from ..errors import AssemblyError, PackagingError
from ..renderer.artifacts import (
    COMPOSE_PATH,
    ENV_PATH,
    GITIGNORE_PATH,
    NGINX_CONF_PATH,
    ODOO_CONF_PATH,
    SETUP_SCRIPT_PATH,
)
from ..renderer.templates import TemplateRenderer
from .packager import Packager, ZipPackager

ROOT_FILES: tuple[str, ...] = (COMPOSE_PATH, ENV_PATH, GITIGNORE_PATH, SETUP_SCRIPT_PATH)

PLACEHOLDER_NAME = "README.md"

# Folder -> placeholder template
PLACEHOLDER_TEMPLATES: dict[str, str] = {
    "logs/": "placeholders/logs.md.j2",
    "addons/": "placeholders/addons.md.j2",
    "nginx/ssl/": "placeholders/nginx_ssl.md.j2",
}
DEFAULT_PLACEHOLDER_TEMPLATE = "placeholders/default.md.j2"


class ArchiveManifest(BaseModel):
    """Folder/file layout of one bundle.

    ``folders`` maps a folder path (with trailing slash) to the artifact
    paths it holds; an empty tuple marks a folder that will be filled with a
    placeholder document.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str
    root_files: tuple[str, ...] = Field(default_factory=tuple)
    folders: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    def expected_artifacts(self) -> list[str]:
        """Every artifact path the layout needs, root files first."""
        paths = list(self.root_files)
        for files in self.folders.values():
            paths.extend(files)
        return paths

    def placeholder_folders(self) -> list[str]:
        return [folder for folder, files in self.folders.items() if not files]

    def archive_path(self, relative: str) -> str:
        """Path of *relative* inside the archive (below the project folder)."""
        return f"{self.project_name}/{relative}"


def build_manifest(config: ConfigModel) -> ArchiveManifest:
    """Return the bundle layout for *config*."""
    folders: dict[str, tuple[str, ...]] = {
        "config/": (ODOO_CONF_PATH,),
        "logs/": (),
        "addons/": (),
    }
    if config.enable_nginx:
        folders["nginx/"] = (NGINX_CONF_PATH,)
        folders["nginx/ssl/"] = ()
    return ArchiveManifest(
        project_name=config.project_name,
        root_files=ROOT_FILES,
        folders=folders,
    )


class ArchiveAssembler:
    """Turns rendered artifacts into a packaged bundle.

    Args:
        packager: Archive backend. Defaults to :class:`ZipPackager`.
        renderer: Template renderer used for placeholder documents.
    """

    def __init__(
        self,
        packager: Packager | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.packager = packager or ZipPackager()
        self.renderer = renderer or TemplateRenderer()

    def render_placeholder(self, folder: str, config: ConfigModel) -> str:
        """Explanatory README for a folder that has no artifact of its own."""
        template = PLACEHOLDER_TEMPLATES.get(folder, DEFAULT_PLACEHOLDER_TEMPLATE)
        return self.renderer.render(
            template,
            {
                "folder": folder,
                "project_name": config.project_name,
                "server_name": config.server_name,
            },
        )

    def collect_entries(
        self,
        artifacts: Mapping[str, str],
        config: ConfigModel,
        manifest: ArchiveManifest | None = None,
    ) -> dict[str, bytes]:
        """Map archive paths to file contents, placeholders included.

        Raises:
            AssemblyError: If an artifact the layout expects is missing, or
                if an artifact has no place in the layout.
        """
        manifest = manifest or build_manifest(config)
        expected = manifest.expected_artifacts()

        missing = [path for path in expected if path not in artifacts]
        if missing:
            raise AssemblyError(f"Missing artifacts for archive: {', '.join(missing)}")
        unexpected = [path for path in artifacts if path not in expected]
        if unexpected:
            raise AssemblyError(
                f"Artifacts not part of the archive layout: {', '.join(unexpected)}"
            )

        entries: dict[str, bytes] = {}
        for path in manifest.root_files:
            entries[manifest.archive_path(path)] = artifacts[path].encode("utf-8")
        for folder, files in manifest.folders.items():
            if not files:
                readme = self.render_placeholder(folder, config)
                entries[manifest.archive_path(folder + PLACEHOLDER_NAME)] = readme.encode("utf-8")
                continue
            for path in files:
                entries[manifest.archive_path(path)] = artifacts[path].encode("utf-8")
        return entries

    async def assemble(
        self,
        artifacts: Mapping[str, str],
        config: ConfigModel,
    ) -> tuple[ArchiveManifest, bytes]:
        """Lay out and package *artifacts*.

        Returns:
            The manifest and the packaged archive bytes.

        Raises:
            AssemblyError: The artifact set does not match the layout.
            PackagingError: The packager failed.
        """
        manifest = build_manifest(config)
        entries = self.collect_entries(artifacts, config, manifest)
        try:
            payload = await asyncio.to_thread(self.packager.compress, entries)
        except PackagingError:
            raise
        except Exception as exc:
            raise PackagingError(f"Could not package archive: {exc}") from exc
        return manifest, payload
