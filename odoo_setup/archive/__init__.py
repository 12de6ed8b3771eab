"""Archive assembly for the deployment bundle."""

from odoo_setup.archive.assembler import (
    ArchiveAssembler,
    ArchiveManifest,
    build_manifest,
)
from odoo_setup.archive.packager import Packager, ZipPackager

__all__ = [
    "ArchiveAssembler",
    "ArchiveManifest",
    "Packager",
    "ZipPackager",
    "build_manifest",
]
