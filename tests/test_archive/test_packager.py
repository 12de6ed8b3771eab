"""Tests for the zip packager (odoo_setup.archive.packager)."""

from __future__ import annotations

import io
import zipfile

import pytest

from odoo_setup.archive import Packager, ZipPackager

pytestmark = pytest.mark.unit


FILES = {
    "acme/docker-compose.yml": b"services: {}\n",
    "acme/setup.sh": b"#!/bin/bash\necho hi\n",
    "acme/config/odoo.conf": b"[options]\n",
    "acme/nginx/ssl/README.md": b"# TLS\n",
}


def _open(payload: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(payload))


class TestZipPackager:
    def test_satisfies_protocol(self):
        assert isinstance(ZipPackager(), Packager)

    def test_contents_round_trip(self):
        with _open(ZipPackager().compress(FILES)) as archive:
            for name, payload in FILES.items():
                assert archive.read(name) == payload

    def test_directory_entries_parents_first(self):
        with _open(ZipPackager().compress(FILES)) as archive:
            dirs = [info.filename for info in archive.infolist() if info.is_dir()]
        assert dirs == ["acme/", "acme/config/", "acme/nginx/", "acme/nginx/ssl/"]

    def test_file_modes(self):
        with _open(ZipPackager().compress(FILES)) as archive:
            modes = {info.filename: (info.external_attr >> 16) & 0o777 for info in archive.infolist()}
        assert modes["acme/setup.sh"] == 0o755
        assert modes["acme/config/odoo.conf"] == 0o644
        assert modes["acme/"] == 0o755

    def test_output_is_deterministic(self):
        packager = ZipPackager()
        assert packager.compress(FILES) == packager.compress(dict(FILES))

    def test_deflated_by_default(self):
        with _open(ZipPackager().compress(FILES)) as archive:
            assert archive.getinfo("acme/setup.sh").compress_type == zipfile.ZIP_DEFLATED

    def test_stored_compression(self):
        packager = ZipPackager(compression=zipfile.ZIP_STORED)
        with _open(packager.compress(FILES)) as archive:
            assert archive.getinfo("acme/setup.sh").compress_type == zipfile.ZIP_STORED

    def test_empty_input(self):
        with _open(ZipPackager().compress({})) as archive:
            assert archive.namelist() == []
