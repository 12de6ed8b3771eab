"""Human-readable review of a configuration before and after synthesis.

Produces the summary shown to the user and the list of docker commands they
will run next.  The access URL here is built from the same ``http_port`` the
compose and env files use.
"""

from __future__ import annotations

from .config import ConfigModel


def access_url(config: ConfigModel) -> str:
    return config.access_url


def _enabled(flag: bool) -> str:
    return "enabled" if flag else "disabled"


def summarize(config: ConfigModel) -> dict[str, str]:
    """Return an ordered ``{label: value}`` summary of *config*.

    Passwords are never included.
    """
    workers = (
        "0 (development)" if config.workers == 0 else f"{config.workers} workers"
    )
    postgres_port = "exposed (5432)" if config.enable_postgres_port else "internal only"
    return {
        "Project": config.project_name,
        "Odoo version": config.odoo_version,
        "HTTP port": str(config.http_port),
        "Chat port": str(config.chat_port),
        "Domain": config.domain.strip() or "localhost (development)",
        "Workers": workers,
        "Cron threads": str(config.cron_threads),
        "Memory": f"{config.memory_limit} GB",
        "Log level": config.log_level,
        "Redis": _enabled(config.enable_redis),
        "Nginx": _enabled(config.enable_nginx),
        "Database": f"{config.db_name} (user: {config.db_user})",
        "PostgreSQL port": postgres_port,
        "Access URL": access_url(config),
    }


def docker_commands(config: ConfigModel) -> list[tuple[str, str]]:
    """Return ``(description, command)`` pairs for running the bundle."""
    return [
        ("Enter the project directory", f"cd {config.project_name}"),
        ("Run the setup script (Linux/macOS)", "chmod +x setup.sh && ./setup.sh"),
        ("Or start the stack manually", "docker-compose up -d"),
        ("Check container status", "docker-compose ps"),
        ("Open Odoo", f"# URL: {access_url(config)}"),
        ("Follow the logs", "docker-compose logs -f odoo"),
        ("Stop the stack", "docker-compose down"),
    ]
