"""Shared fixtures: a throwaway application directory, bundle files and catalogs on disk."""

import io
import json
import tarfile
import zipfile

import pytest

from aipman.bundle import BundleMaterializer
from aipman.console import Console
from aipman.lifecycle import Lifecycle
from aipman.manifest import ManifestStore
from aipman.package import Package

SCRIPT = "#!/bin/sh\necho running {name}\nexit 0\n"


@pytest.fixture
def console():
    return Console(verbose=False)


@pytest.fixture
def app_dir(tmp_path):
    return tmp_path / "Applications"


@pytest.fixture
def source_dir(tmp_path):
    path = tmp_path / "sources"
    path.mkdir()
    return path


@pytest.fixture
def make_bundle(source_dir):
    """Write a plain bundle file and return a package record pointing at it via file://."""
    def _make(name, version, body=None, description="A test app"):
        path = source_dir / f"{name}-{version}.bin"
        path.write_text(body or SCRIPT.format(name=name))
        return Package(name=name, version=version, description=description, url=path.as_uri())
    return _make


@pytest.fixture
def make_archive(source_dir):
    """Write a zip or tar.gz bundle containing the given members and return a compressed package record."""
    def _make(name, version, members, kind="zip"):
        if kind == "zip":
            path = source_dir / f"{name}-{version}.zip"
            with zipfile.ZipFile(path, "w") as zf:
                for member, content in members.items():
                    zf.writestr(member, content)
        else:
            path = source_dir / f"{name}-{version}.tar.gz"
            with tarfile.open(path, "w:gz") as tf:
                for member, content in members.items():
                    data = content.encode()
                    info = tarfile.TarInfo(member)
                    info.size = len(data)
                    tf.addfile(info, io.BytesIO(data))
        return Package(name=name, version=version, description="archived", url=path.as_uri(), compressed=True)
    return _make


@pytest.fixture
def write_catalog(source_dir):
    def _write(packages, filename="pkgs.json"):
        path = source_dir / filename
        path.write_text(json.dumps([package.to_dict() for package in packages]))
        return path
    return _write


@pytest.fixture
def store(app_dir, console):
    return ManifestStore(app_dir / "aip_man_pkg_list.json", console=console)


@pytest.fixture
def materializer(app_dir, console):
    return BundleMaterializer(app_dir, console=console)


@pytest.fixture
def make_lifecycle(store, materializer, console):
    """Build a lifecycle manager over an in-memory catalog, answering every confirmation with `answer`."""
    def _make(catalog, answer=True):
        questions = []

        def confirm(question):
            questions.append(question)
            return answer(question) if callable(answer) else answer

        lifecycle = Lifecycle(store, materializer, lambda: list(catalog), confirm=confirm, console=console)
        lifecycle.questions = questions
        return lifecycle
    return _make
