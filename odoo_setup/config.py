"""Odoo setup generator configuration.

Two typed models live here.  ``ConfigModel`` is the immutable snapshot of the
deployment parameters collected from the user; every artifact of a synthesis
run is rendered from exactly one instance of it.  ``Settings`` holds the
tool's own knobs (where to write output, secret length, ...) and can be
populated from environment variables.

Both use Pydantic v2 models so they can be serialised to/from JSON without
boiler-plate.
"""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

GIB = 1024 * 1024 * 1024

DEFAULT_HTTP_PORT = 8069
DEFAULT_CHAT_PORT = 8072
DEFAULT_SECRET_LENGTH = 24

LOG_LEVELS: tuple[str, ...] = ("error", "warn", "info", "debug")


# ---------------------------------------------------------------------------
# Deployment parameters
# ---------------------------------------------------------------------------


class ConfigModel(BaseModel):
    """Deployment parameters for one Odoo project.

    Field names are snake_case in Python; the JSON wire form uses the
    camelCase aliases (``projectName``, ``httpPort``, ...).  Either spelling
    is accepted on construction.

    The model only coerces types.  Range and format rules are enforced by
    :func:`odoo_setup.validator.validate`, which needs to see invalid values
    in order to report them.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="forbid",
    )

    project_name: str = Field(default="", description="Project name, used for containers and the archive root")
    odoo_version: str = Field(default="17.0", description="Odoo image tag, passed through verbatim")
    http_port: int = Field(default=DEFAULT_HTTP_PORT, description="Host port mapped to Odoo's 8069")
    chat_port: int = Field(default=DEFAULT_CHAT_PORT, description="Host port mapped to Odoo's 8072 (longpolling)")
    domain: str = Field(default="", description="Public hostname; empty means localhost")

    db_name: str = Field(default="odoo")
    db_user: str = Field(default="odoo")
    db_password: str = Field(default="", repr=False)
    admin_password: str = Field(default="", repr=False)
    enable_postgres_port: bool = Field(default=False, description="Expose 5432 on the host")

    workers: int = Field(default=2, description="Odoo worker processes (0 = threaded dev mode)")
    cron_threads: int = Field(default=1)
    memory_limit: int = Field(default=2, description="Memory limit in GB")
    log_level: str = Field(default="info")
    enable_redis: bool = Field(default=False)
    enable_nginx: bool = Field(default=False)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def server_name(self) -> str:
        """The configured domain, or ``localhost`` when none was given."""
        return self.domain.strip() or "localhost"

    @property
    def access_url(self) -> str:
        """URL the user opens once the stack is running."""
        return f"http://{self.server_name}:{self.http_port}"

    @property
    def memory_reservation_gb(self) -> int:
        """Soft container reservation: one GB below the hard limit, never below 1."""
        return max(1, self.memory_limit - 1)

    @property
    def memory_hard_bytes(self) -> int:
        return self.memory_limit * GIB

    @property
    def memory_soft_bytes(self) -> int:
        """80% of the limit, truncated to whole GB *before* scaling to bytes.

        This matches the historical ``odoo.conf`` output: a 1 GB limit yields
        a soft limit of 0, and the value can differ from
        ``int(memory_hard_bytes * 0.8)``.
        """
        return math.floor(self.memory_limit * 0.8) * GIB

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase dict form used in parameter files."""
        return self.model_dump(by_alias=True)

    def save(self, path: Path) -> Path:
        """Persist the parameters to a JSON file (camelCase keys)."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ConfigModel":
        """Load parameters from a JSON file written by :meth:`save` or by hand."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)


# ---------------------------------------------------------------------------
# Tool settings
# ---------------------------------------------------------------------------


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Settings for the generator itself (not for the generated deployment)."""

    output_dir: Path = Field(default=Path("./output"))
    secret_length: int = Field(default=DEFAULT_SECRET_LENGTH, ge=1, description="Length of generated passwords")
    write_files: bool = Field(default=True, description="Write the rendered bundle as a directory tree")
    write_archive: bool = Field(default=True, description="Write the zipped bundle")

    def archive_path(self, project_name: str) -> Path:
        """Where the zipped bundle for *project_name* is written."""
        return self.output_dir / f"{project_name}-odoo-config.zip"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            ODOO_SETUP_OUTPUT_DIR, ODOO_SETUP_SECRET_LENGTH,
            ODOO_SETUP_WRITE_FILES, ODOO_SETUP_WRITE_ARCHIVE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("ODOO_SETUP_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["ODOO_SETUP_OUTPUT_DIR"])
        if os.environ.get("ODOO_SETUP_SECRET_LENGTH"):
            kwargs["secret_length"] = int(os.environ["ODOO_SETUP_SECRET_LENGTH"])
        kwargs["write_files"] = _env_flag("ODOO_SETUP_WRITE_FILES", True)
        kwargs["write_archive"] = _env_flag("ODOO_SETUP_WRITE_ARCHIVE", True)
        return cls(**kwargs)
