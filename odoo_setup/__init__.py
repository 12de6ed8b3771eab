"""Odoo setup generator.

Turns a handful of deployment parameters into a consistent Docker bundle for
Odoo: ``docker-compose.yml``, ``.env``, ``config/odoo.conf``, ``setup.sh``,
``.gitignore`` and, optionally, ``nginx/nginx.conf``, packaged as a zip.

Usage::

    from odoo_setup import Pipeline, SynthesisSession

    config = SynthesisSession().build_config(project_name="acme")
    result = await Pipeline().run(config)
    if not result.valid:
        print(result.first_violation)
"""

from odoo_setup.config import ConfigModel, Settings
from odoo_setup.errors import AssemblyError, PackagingError, SynthesisError, ValidationFailed
from odoo_setup.passwords import SecretGenerator
from odoo_setup.pipeline import Pipeline, SynthesisResult, SynthesisSession
from odoo_setup.validator import validate

__all__ = [
    "AssemblyError",
    "ConfigModel",
    "PackagingError",
    "Pipeline",
    "SecretGenerator",
    "Settings",
    "SynthesisError",
    "SynthesisResult",
    "SynthesisSession",
    "ValidationFailed",
    "validate",
]
