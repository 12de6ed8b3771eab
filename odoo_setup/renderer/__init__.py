"""Artifact rendering for the Odoo deployment bundle.

Quick usage::

    from odoo_setup.renderer import ArtifactRenderer

    artifacts = ArtifactRenderer().render_all(config)
    for artifact in artifacts:
        print(artifact.path)
"""

from odoo_setup.renderer.artifacts import (
    ArtifactRenderer,
    GeneratedArtifact,
    as_mapping,
    build_context,
    write_artifacts,
)
from odoo_setup.renderer.templates import TemplateRenderer

__all__ = [
    "ArtifactRenderer",
    "GeneratedArtifact",
    "TemplateRenderer",
    "as_mapping",
    "build_context",
    "write_artifacts",
]
