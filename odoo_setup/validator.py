"""Validation of deployment parameters.

:func:`validate` is a pure function over a :class:`ConfigModel`.  It works in
two tiers:

1. A *critical gate*: if the project name or either password is missing,
   exactly one message is returned (for the first missing field) and nothing
   else is checked.  An obviously incomplete form would otherwise produce a
   pile of derivative errors.
2. *Accumulating checks*: every remaining rule runs and all violations are
   returned together, in a stable order.

An empty list means the model may be rendered.
"""

from __future__ import annotations

import re
from typing import Callable

from .config import LOG_LEVELS, ConfigModel
from .errors import ValidationFailed

MIN_PORT = 1024
MAX_PORT = 65535
MIN_PASSWORD_LENGTH = 12

RESERVED_PROJECT_NAMES: frozenset[str] = frozenset(
    {"docker", "compose", "postgres", "redis", "nginx", "localhost", "api", "www"}
)

# Ports of services commonly found on the same host.
WELL_KNOWN_PORTS: frozenset[int] = frozenset(
    {3306, 5432, 6379, 22, 80, 443, 21, 25, 53, 110, 143, 993, 995}
)

_PROJECT_NAME_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")
_DOMAIN_RE = re.compile(
    r"^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$"
)
_IPV4_RE = re.compile(r"^\d+\.\d+\.\d+\.\d+$")
_DIGITS_RE = re.compile(r"^\d+$")

Rule = Callable[[ConfigModel], list[str]]


# ---------------------------------------------------------------------------
# Critical gate
# ---------------------------------------------------------------------------

_CRITICAL_FIELDS: tuple[tuple[str, str], ...] = (
    ("project_name", "Project name is required"),
    ("db_password", "Database password is required"),
    ("admin_password", "Master (admin) password is required"),
)


def _critical_violation(config: ConfigModel) -> str | None:
    for field_name, message in _CRITICAL_FIELDS:
        value = getattr(config, field_name)
        if not value or not value.strip():
            return message
    return None


# ---------------------------------------------------------------------------
# Accumulating rules
# ---------------------------------------------------------------------------


def check_project_name(config: ConfigModel) -> list[str]:
    errors: list[str] = []
    name = config.project_name
    if not _PROJECT_NAME_RE.fullmatch(name):
        errors.append(
            "Project name must contain only lowercase letters, digits and hyphens "
            "(and cannot start or end with a hyphen)"
        )
    if name.lower() in RESERVED_PROJECT_NAMES:
        errors.append(f'"{name}" is a reserved word. Choose another project name.')
    return errors


def check_ports(config: ConfigModel) -> list[str]:
    errors: list[str] = []
    labelled = (("HTTP", config.http_port), ("Chat", config.chat_port))

    for label, port in labelled:
        if port < MIN_PORT or port > MAX_PORT:
            errors.append(f"{label} port must be between {MIN_PORT} and {MAX_PORT}")

    if config.http_port == config.chat_port:
        errors.append("HTTP and chat ports cannot be equal")

    for _label, port in labelled:
        if port in WELL_KNOWN_PORTS:
            errors.append(
                f"Port {port} is commonly used by other services. Choose another port."
            )
    return errors


def check_domain(config: ConfigModel) -> list[str]:
    """Domain is optional; when given it must be a real public hostname."""
    domain = config.domain.strip()
    if not domain:
        return []

    errors: list[str] = []
    if not _DOMAIN_RE.fullmatch(domain):
        errors.append("Invalid domain format (e.g. mysite.com)")
    if "localhost" in domain.lower() or _IPV4_RE.fullmatch(domain):
        errors.append("Use a real domain, or leave it blank for local development")
    return errors


def _password_errors(label: str, password: str) -> list[str]:
    errors: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"{label} must be at least {MIN_PASSWORD_LENGTH} characters long")
    if any(ch.isspace() for ch in password):
        errors.append(f"{label} cannot contain whitespace")
    if _DIGITS_RE.fullmatch(password):
        errors.append(f"{label} cannot consist only of digits")
    if "'" in password:
        errors.append(f"{label} cannot contain single quotes")
    return errors


def check_passwords(config: ConfigModel) -> list[str]:
    return _password_errors("Database password", config.db_password) + _password_errors(
        "Master password", config.admin_password
    )


def check_worker_count(config: ConfigModel) -> list[str]:
    """Exactly one worker is rejected; 0 (threaded mode) and 2+ are accepted."""
    if 0 < config.workers < 2:
        return ["If workers are used, configure at least 2. Use 0 only for development."]
    if config.workers < 0:
        return ["Workers cannot be negative"]
    return []


def check_database(config: ConfigModel) -> list[str]:
    errors: list[str] = []
    if not config.db_name.strip():
        errors.append("Database name is required")
    if not config.db_user.strip():
        errors.append("Database user is required")
    return errors


def check_resources(config: ConfigModel) -> list[str]:
    errors: list[str] = []
    if config.cron_threads < 0:
        errors.append("Cron threads cannot be negative")
    if config.memory_limit < 1:
        errors.append("Memory limit must be at least 1 GB")
    if config.log_level not in LOG_LEVELS:
        errors.append(f"Log level must be one of: {', '.join(LOG_LEVELS)}")
    return errors


RULES: tuple[Rule, ...] = (
    check_project_name,
    check_ports,
    check_domain,
    check_passwords,
    check_worker_count,
    check_database,
    check_resources,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate(config: ConfigModel) -> list[str]:
    """Return every violation in *config*, in a stable order (empty if valid)."""
    critical = _critical_violation(config)
    if critical is not None:
        return [critical]

    errors: list[str] = []
    for rule in RULES:
        errors.extend(rule(config))
    return errors


def require_valid(config: ConfigModel) -> ConfigModel:
    """Return *config* unchanged, or raise :class:`ValidationFailed`."""
    violations = validate(config)
    if violations:
        raise ValidationFailed(violations)
    return config
