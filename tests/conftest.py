"""Pytest configuration and fixtures."""

from collections.abc import Callable
from pathlib import Path
from typing import Optional

import pytest

from package_licenses.classifiers.base import BaseClassifier
from package_licenses.models import License, PackageRecord

NUSPEC_NAMESPACE = "http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd"


class FakeClassifier(BaseClassifier):
    """Classifier double answering from a URL mapping and recording calls."""

    def __init__(
        self,
        answers: Optional[dict[str, License]] = None,
        errors: Optional[dict[str, Exception]] = None,
    ) -> None:
        self.answers = answers or {}
        self.errors = errors or {}
        self.calls: list[str] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "Fake"

    async def classify(self, url: str) -> Optional[License]:
        self.calls.append(url)
        if url in self.errors:
            raise self.errors[url]
        return self.answers.get(url)

    async def close(self) -> None:
        self.closed = True


def build_nuspec(
    package_id: str,
    version: str,
    namespace: str = NUSPEC_NAMESPACE,
    **metadata: str,
) -> str:
    """Return a nuspec document with the given metadata elements."""
    elements = [f"<id>{package_id}</id>", f"<version>{version}</version>"]
    elements += [f"<{name}>{value}</{name}>" for name, value in metadata.items()]
    body = "\n    ".join(elements)
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        f'<package xmlns="{namespace}">\n'
        f"  <metadata>\n    {body}\n  </metadata>\n"
        "</package>\n"
    )


@pytest.fixture
def make_classifier() -> Callable[..., FakeClassifier]:
    """Return a factory for FakeClassifier instances."""
    return FakeClassifier


@pytest.fixture
def mit_license() -> License:
    """Return a canonical MIT license."""
    return License(id="MIT", name="MIT License", text="MIT...", is_master=True)


@pytest.fixture
def newtonsoft() -> PackageRecord:
    """Return a package declaring only a license URL."""
    return PackageRecord(
        id="Newtonsoft.Json",
        version="13.0.1",
        license_url="https://example/license",
    )


@pytest.fixture
def write_v3_package() -> Callable[..., Path]:
    """Return a helper writing a nuspec into a v3-layout package folder."""

    def _write(root: Path, package_id: str, version: str, **metadata: str) -> Path:
        version_dir = root / package_id.lower() / version.lower()
        version_dir.mkdir(parents=True, exist_ok=True)
        nuspec = version_dir / f"{package_id.lower()}.nuspec"
        nuspec.write_text(build_nuspec(package_id, version, **metadata), encoding="utf-8")
        return nuspec

    return _write


@pytest.fixture
def nuspec_xml() -> Callable[..., str]:
    """Return the nuspec document builder."""
    return build_nuspec
