"""Odoo setup synthesis pipeline.

One synthesis run is a single linear pass over one immutable
``ConfigModel``:

1. VALIDATE -- collect violations; stop if there are any.
2. RENDER   -- render every artifact from the same model.
3. ASSEMBLE -- lay out the archive, add placeholders, package it.

The pipeline never retries and keeps no state between runs.  A packaging
failure does not discard the rendered artifacts: they are returned so the
caller can fall back to writing or showing them individually.

Usage::

    python -m odoo_setup.pipeline --project-name acme --domain acme.com
    python -m odoo_setup.pipeline --config params.json --output ./out
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError
from rich.panel import Panel
from rich.text import Text

from .archive import ArchiveAssembler, ArchiveManifest
from .config import DEFAULT_SECRET_LENGTH, LOG_LEVELS, ConfigModel, Settings
from .errors import PackagingError
from .passwords import SecretGenerator
from .renderer import ArtifactRenderer, GeneratedArtifact, as_mapping, write_artifacts
from .review import docker_commands, summarize
from .utils import (
    console,
    print_error,
    print_section_header,
    print_success,
    print_summary_table,
    print_warning,
    write_bytes_file,
)
from .validator import require_valid, validate


# ---------------------------------------------------------------------------
# Session: default credentials for one wizard run
# ---------------------------------------------------------------------------


class SynthesisSession:
    """Holds the generated default passwords for one run.

    Two passwords are generated when the session is created (database and
    master).  They are only used for fields the caller leaves empty; a
    caller-supplied password is never replaced.
    """

    def __init__(
        self,
        generator: SecretGenerator | None = None,
        secret_length: int = DEFAULT_SECRET_LENGTH,
    ) -> None:
        self.generator = generator or SecretGenerator()
        self.secret_length = secret_length
        self.db_password = ""
        self.admin_password = ""
        self.regenerate_passwords()

    def regenerate_passwords(self) -> None:
        self.db_password = self.generator.generate(self.secret_length)
        self.admin_password = self.generator.generate(self.secret_length)

    def build_config(self, **params: Any) -> ConfigModel:
        """Create the run's ``ConfigModel``, filling in missing passwords.

        Raises:
            pydantic.ValidationError: A value cannot be coerced to its type.
        """
        config = ConfigModel(**params)
        update: dict[str, str] = {}
        if not config.db_password.strip():
            update["db_password"] = self.db_password
        if not config.admin_password.strip():
            update["admin_password"] = self.admin_password
        return config.model_copy(update=update) if update else config


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


class SynthesisResult(BaseModel):
    """Outcome of one synthesis run."""

    config: ConfigModel
    violations: list[str] = Field(default_factory=list)
    artifacts: list[GeneratedArtifact] = Field(default_factory=list)
    manifest: Optional[ArchiveManifest] = None
    archive: Optional[bytes] = Field(default=None, repr=False)
    packaging_error: Optional[str] = None

    @property
    def valid(self) -> bool:
        return not self.violations

    @property
    def success(self) -> bool:
        return self.valid and self.packaging_error is None and self.archive is not None

    @property
    def first_violation(self) -> str | None:
        """The blocking message to show the user first."""
        return self.violations[0] if self.violations else None

    @property
    def files(self) -> dict[str, str]:
        return as_mapping(self.artifacts)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class Pipeline:
    """Runs validate -> render -> assemble for one ``ConfigModel``.

    Attributes:
        settings: Tool settings (output locations, secret length).
        renderer: Artifact renderer.
        assembler: Archive assembler (owns the packager).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        renderer: ArtifactRenderer | None = None,
        assembler: ArchiveAssembler | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.renderer = renderer or ArtifactRenderer(secret_length=self.settings.secret_length)
        self.assembler = assembler or ArchiveAssembler()

    def render(self, config: ConfigModel) -> list[GeneratedArtifact]:
        """Render the bundle for a model that must already be valid.

        Raises:
            ValidationFailed: *config* has violations.
        """
        return self.renderer.render_all(require_valid(config))

    async def run(self, config: ConfigModel) -> SynthesisResult:
        """Execute one synthesis run.

        Validation violations and packaging failures are reported in the
        result.  An ``AssemblyError`` means the renderer and the archive
        layout disagree, and is raised.
        """
        violations = validate(config)
        if violations:
            return SynthesisResult(config=config, violations=violations)

        artifacts = self.renderer.render_all(config)
        result = SynthesisResult(config=config, artifacts=artifacts)

        try:
            manifest, payload = await self.assembler.assemble(as_mapping(artifacts), config)
        except PackagingError as exc:
            result.packaging_error = str(exc)
            return result

        result.manifest = manifest
        result.archive = payload
        return result

    async def write(self, result: SynthesisResult) -> list[Path]:
        """Write a run's output below ``settings.output_dir``.

        The rendered tree goes to ``<output>/<project>/`` and the archive to
        ``<output>/<project>-odoo-config.zip``.  When packaging failed, the
        individual files are still written.
        """
        if not result.valid:
            return []

        project = result.config.project_name
        written: list[Path] = []
        if self.settings.write_files or result.archive is None:
            written.extend(
                await write_artifacts(result.artifacts, self.settings.output_dir / project)
            )
        if self.settings.write_archive and result.archive is not None:
            written.append(
                await write_bytes_file(self.settings.archive_path(project), result.archive)
            )
        return written


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

# flag -> ConfigModel field, for simple typed options
_VALUE_OPTIONS: tuple[tuple[str, str, type, str], ...] = (
    ("--project-name", "project_name", str, "Project name (lowercase, digits, hyphens)"),
    ("--odoo-version", "odoo_version", str, "Odoo image tag (default: 17.0)"),
    ("--http-port", "http_port", int, "Host HTTP port (default: 8069)"),
    ("--chat-port", "chat_port", int, "Host longpolling port (default: 8072)"),
    ("--domain", "domain", str, "Public domain (default: localhost)"),
    ("--db-name", "db_name", str, "PostgreSQL database name"),
    ("--db-user", "db_user", str, "PostgreSQL user"),
    ("--db-password", "db_password", str, "PostgreSQL password (generated if omitted)"),
    ("--admin-password", "admin_password", str, "Odoo master password (generated if omitted)"),
    ("--workers", "workers", int, "Odoo workers (0 for development, otherwise >= 2)"),
    ("--cron-threads", "cron_threads", int, "Cron threads"),
    ("--memory-limit", "memory_limit", int, "Memory limit in GB"),
)

_FLAG_OPTIONS: tuple[tuple[str, str, str], ...] = (
    ("--enable-postgres-port", "enable_postgres_port", "Expose PostgreSQL on 5432"),
    ("--enable-redis", "enable_redis", "Add a Redis cache service"),
    ("--enable-nginx", "enable_nginx", "Add an Nginx reverse proxy"),
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="odoo-setup",
        description="Odoo setup generator -- Docker deployment bundle for Odoo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  odoo-setup --project-name acme\n"
            "  odoo-setup --project-name acme --domain acme.com --enable-nginx\n"
            "  odoo-setup --config params.json --output ./bundles\n"
        ),
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="JSON parameter file (camelCase keys); flags override its values",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory (default: ./output or $ODOO_SETUP_OUTPUT_DIR)",
    )
    parser.add_argument("--no-archive", action="store_true", help="Do not write the zip archive")
    parser.add_argument("--no-files", action="store_true", help="Do not write the file tree")
    parser.add_argument(
        "--print-only",
        action="store_true",
        help="Print the rendered files instead of writing anything",
    )
    for flag, dest, kind, help_text in _VALUE_OPTIONS:
        parser.add_argument(flag, dest=dest, type=kind, default=None, help=help_text)
    parser.add_argument(
        "--log-level", dest="log_level", choices=LOG_LEVELS, default=None,
        help="Odoo log level (default: info)",
    )
    for flag, dest, help_text in _FLAG_OPTIONS:
        parser.add_argument(
            flag, dest=dest, action=argparse.BooleanOptionalAction, default=None, help=help_text
        )
    return parser


def collect_params(args: argparse.Namespace) -> dict[str, Any]:
    """Merge the parameter file (if any) with explicit command-line values."""
    params: dict[str, Any] = {}
    if args.config:
        params.update(ConfigModel.load(Path(args.config)).model_dump())
    names = [dest for _, dest, _, _ in _VALUE_OPTIONS] + ["log_level"]
    names += [dest for _, dest, _ in _FLAG_OPTIONS]
    for name in names:
        value = getattr(args, name)
        if value is not None:
            params[name] = value
    return params


def _print_artifacts(artifacts: list[GeneratedArtifact]) -> None:
    for artifact in artifacts:
        console.print(Panel(Text(artifact.content), title=artifact.path, expand=False))


def _print_commands(config: ConfigModel) -> None:
    print_section_header("Next steps", color="bright_blue")
    for step, (description, command) in enumerate(docker_commands(config), start=1):
        console.print(f"  [dim]# {step}. {description}[/dim]")
        console.print(f"  [cyan]{command}[/cyan]", markup=True, highlight=False)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``python -m odoo_setup.pipeline``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.output:
        settings.output_dir = Path(args.output)
    if args.no_archive:
        settings.write_archive = False
    if args.no_files:
        settings.write_files = False

    try:
        params = collect_params(args)
    except (OSError, ValidationError) as exc:
        print_error(f"Could not read parameter file: {exc}")
        sys.exit(1)

    session = SynthesisSession(secret_length=settings.secret_length)
    try:
        config = session.build_config(**params)
    except ValidationError as exc:
        print_error(f"Invalid parameters: {exc}")
        sys.exit(1)

    pipeline = Pipeline(settings)
    result = asyncio.run(pipeline.run(config))

    if not result.valid:
        print_error(f"Error: {result.first_violation}")
        for message in result.violations[1:]:
            console.print(f"  [red]- {message}[/red]")
        sys.exit(1)

    print_section_header("Configuration")
    print_summary_table(summarize(config), title=f"Odoo project {config.project_name}")

    if args.print_only:
        _print_artifacts(result.artifacts)
        _print_commands(config)
        return

    written = asyncio.run(pipeline.write(result))
    for path in written:
        console.print(f"  [green]+[/green] {path}")
    _print_commands(config)

    if result.packaging_error:
        print_error(result.packaging_error)
        print_warning("Archive not created; the files above were written individually.")
        sys.exit(1)

    print_success(f"Bundle for {config.project_name} generated.")


if __name__ == "__main__":
    main()
