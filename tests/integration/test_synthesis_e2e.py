"""End-to-end synthesis: parameters in, extracted bundle out.

Runs the whole pipeline with the real zip packager, extracts the archive to
disk and checks that the files agree with each other.
"""

from __future__ import annotations

import configparser
import io
import zipfile
from pathlib import Path

import pytest
import yaml

from odoo_setup import Pipeline, Settings, SynthesisSession

pytestmark = pytest.mark.integration


def _env(path: Path) -> dict[str, str]:
    values = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        if line and not line.startswith("#"):
            key, _, value = line.partition("=")
            values[key] = value.strip("'")
    return values


@pytest.fixture
def full_stack_params() -> dict:
    return {
        "projectName": "northwind",
        "httpPort": 18069,
        "chatPort": 18072,
        "domain": "erp.northwind.io",
        "dbName": "northwind",
        "dbUser": "northwind",
        "workers": 4,
        "cronThreads": 2,
        "memoryLimit": 4,
        "logLevel": "warn",
        "enableRedis": True,
        "enableNginx": True,
        "enablePostgresPort": True,
    }


async def test_full_stack_bundle(full_stack_params, tmp_path: Path):
    session = SynthesisSession()
    config = session.build_config(**full_stack_params)
    pipeline = Pipeline(Settings(output_dir=tmp_path))

    result = await pipeline.run(config)
    assert result.success, result.violations or result.packaging_error

    written = await pipeline.write(result)
    archive_path = tmp_path / "northwind-odoo-config.zip"
    assert archive_path in written

    extract_dir = tmp_path / "extracted"
    with zipfile.ZipFile(io.BytesIO(archive_path.read_bytes())) as archive:
        archive.extractall(extract_dir)

    root = extract_dir / "northwind"
    for relative in (
        "docker-compose.yml",
        ".env",
        ".gitignore",
        "setup.sh",
        "config/odoo.conf",
        "nginx/nginx.conf",
        "logs/README.md",
        "addons/README.md",
        "nginx/ssl/README.md",
    ):
        assert (root / relative).is_file(), relative

    compose = yaml.safe_load((root / "docker-compose.yml").read_text(encoding="utf-8"))
    env = _env(root / ".env")
    conf = configparser.ConfigParser(interpolation=None)
    conf.read(root / "config" / "odoo.conf", encoding="utf-8")
    options = conf["options"]

    assert set(compose["services"]) == {"db", "odoo", "redis", "nginx"}
    assert compose["services"]["db"]["ports"] == ["5432:5432"]
    assert compose["services"]["odoo"]["ports"] == ["18069:8069", "18072:8072"]
    assert compose["services"]["odoo"]["deploy"]["resources"]["limits"]["memory"] == "4G"

    # generated secrets flow into both the env file and odoo.conf
    assert env["POSTGRES_PASSWORD"] == session.db_password == options["db_password"]
    assert env["ODOO_ADMIN_PASSWORD"] == session.admin_password == options["admin_passwd"]

    assert env["HTTP_PORT"] == "18069"
    assert env["DOMAIN"] == "erp.northwind.io"
    assert options["workers"] == "4"
    assert options["log_level"] == "warn"
    assert options["enable_redis"] == "True"
    assert options["db_filter"] == "^northwind$"

    nginx = (root / "nginx" / "nginx.conf").read_text(encoding="utf-8")
    assert "server_name erp.northwind.io;" in nginx

    setup = (root / "setup.sh").read_text(encoding="utf-8")
    assert "http://erp.northwind.io:18069" in setup
    assert "mkdir -p config logs addons nginx nginx/ssl" in setup

    # the written tree and the archive hold the same files
    tree = tmp_path / "northwind"
    for artifact in result.artifacts:
        assert (tree / artifact.path).read_text(encoding="utf-8") == (root / artifact.path).read_text(
            encoding="utf-8"
        )


async def test_invalid_parameters_produce_no_output(tmp_path: Path):
    config = SynthesisSession().build_config(projectName="postgres", httpPort=5432)
    pipeline = Pipeline(Settings(output_dir=tmp_path))

    result = await pipeline.run(config)

    assert not result.valid
    assert any("reserved" in message for message in result.violations)
    assert any("5432" in message for message in result.violations)
    assert await pipeline.write(result) == []
    assert list(tmp_path.iterdir()) == []
