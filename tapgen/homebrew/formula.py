"""Formula synthesis for prebuilt binaries and source builds."""

from __future__ import annotations

from typing import Iterable, List

from .. import buildsystems
from ..buildsystems import BuildStrategy
from ..models import ManifestData, Repository
from ..naming import class_name_for
from .cask import clean_description
from .document import ManifestBuilder, ManifestDocument, ManifestRenderer, generation_header, ruby_string

TOOL_NAME = "tapgen formula"
BINARY_BUILD_SYSTEM = "Binary"


def new_source_formula(
    package_name: str,
    version: str,
    sha256: str,
    url: str,
    repository: Repository,
    strategy: BuildStrategy,
    binary_name: str,
) -> ManifestData:
    """Formula data for a source tarball built with a detected build system."""
    return ManifestData(
        token=package_name,
        class_name=class_name_for(package_name),
        version=version,
        sha256=sha256,
        url=url,
        description=repository.description,
        homepage=repository.homepage,
        license=repository.license,
        source_url=repository.url,
        binary_name=binary_name,
        build_system=strategy.name,
        dependencies=tuple(strategy.dependencies()),
        install_procedure=strategy.install_procedure(binary_name),
        test_procedure=strategy.test_procedure(binary_name),
    )


def new_source_formula_from_files(
    package_name: str,
    version: str,
    sha256: str,
    url: str,
    repository: Repository,
    files: Iterable[str],
    binary_name: str,
) -> ManifestData:
    strategy = buildsystems.detect(files)
    return new_source_formula(package_name, version, sha256, url, repository, strategy, binary_name)


def new_binary_formula(
    package_name: str,
    version: str,
    sha256: str,
    url: str,
    repository: Repository,
    binary_name: str,
    binary_path: str = "",
) -> ManifestData:
    """Formula data for an archive that already contains the executable."""
    return ManifestData(
        token=package_name,
        class_name=class_name_for(package_name),
        version=version,
        sha256=sha256,
        url=url,
        description=repository.description,
        homepage=repository.homepage,
        license=repository.license,
        source_url=repository.url,
        binary_path=binary_path,
        binary_name=binary_name,
        build_system=BINARY_BUILD_SYSTEM,
        install_procedure=buildsystems.binary_install_procedure(binary_name, binary_path),
        test_procedure=buildsystems.version_test_procedure(binary_name),
    )


def build_formula(data: ManifestData) -> ManifestDocument:
    builder = ManifestBuilder()
    builder.header(*generation_header(TOOL_NAME, data.source_url))

    description = clean_description(data.description)
    if description:
        builder.opening(f"# {description}")
    builder.opening(f"class {data.class_name or class_name_for(data.token)} < Formula")

    metadata: List[str] = []
    if description:
        metadata.append(f"desc {ruby_string(description)}")
    metadata.append(f"homepage {ruby_string(data.homepage or data.source_url)}")
    metadata.append(f"url {ruby_string(data.url)}")
    metadata.append(f"sha256 {ruby_string(data.sha256)}")
    if data.license:
        metadata.append(f"license {ruby_string(data.license)}")
    builder.stanza(metadata)

    builder.stanza(f"depends_on {ruby_string(dep)} => :build" for dep in data.dependencies)
    builder.block(data.install_procedure)
    builder.block(data.test_procedure)
    return builder.build()


def render_formula(data: ManifestData, renderer: ManifestRenderer | None = None) -> str:
    return (renderer or ManifestRenderer()).render(build_formula(data))


__all__ = [
    "BINARY_BUILD_SYSTEM",
    "build_formula",
    "new_binary_formula",
    "new_source_formula",
    "new_source_formula_from_files",
    "render_formula",
]
