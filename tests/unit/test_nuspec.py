"""Unit tests for .nuspec reading and serialization."""

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from nuspec_builder.core.exceptions import TemplateError
from nuspec_builder.core.frameworks import parse_framework
from nuspec_builder.core.models import (
    DependencySet,
    FrameworkAssemblyReference,
    Manifest,
    ManifestFile,
    ManifestMetadata,
    PackageDependency,
    ReferenceSet,
)
from nuspec_builder.core.versioning import parse_version, parse_version_range
from nuspec_builder.nuspec import NUSPEC_NAMESPACE, parse_manifest, read_manifest, serialize_manifest

TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<package xmlns="http://schemas.microsoft.com/packaging/2011/08/nuspec.xsd">
  <metadata minClientVersion="2.8">
    <id>Contoso.Template</id>
    <version>1.0</version>
    <authors>Contoso, Fabrikam</authors>
    <requireLicenseAcceptance>true</requireLicenseAcceptance>
    <description>From template</description>
    <dependencies>
      <dependency id="Flat.Pkg" version="1.0" />
      <group targetFramework=".NETFramework4.5">
        <dependency id="PkgA" version="[1.0, 2.0)" />
        <dependency id="NoVersion" />
      </group>
    </dependencies>
    <frameworkAssemblies>
      <frameworkAssembly assemblyName="System.Xml" targetFramework="net40, net45" />
      <frameworkAssembly assemblyName="System" targetFramework=".NETFramework,Version=v4.5" />
    </frameworkAssemblies>
    <references>
      <group targetFramework="net45">
        <reference file="a.dll" />
      </group>
    </references>
    <owners>Contoso</owners>
  </metadata>
  <files>
    <file src="bin/a.dll" target="lib/net45" />
  </files>
</package>
"""


class TestParseManifest:
    def test_metadata_fields(self) -> None:
        metadata = parse_manifest(TEMPLATE).metadata

        assert metadata.id == "Contoso.Template"
        assert metadata.version == parse_version("1.0")
        assert metadata.authors == ["Contoso", "Fabrikam"]
        assert metadata.owners == ["Contoso"]
        assert metadata.require_license_acceptance is True
        assert metadata.min_client_version == "2.8"

    def test_flat_and_grouped_dependencies(self) -> None:
        sets = parse_manifest(TEMPLATE).metadata.dependency_sets

        assert len(sets) == 2
        assert sets[0].target_framework is None
        assert sets[0].dependencies == [PackageDependency("Flat.Pkg", parse_version_range("1.0"))]
        assert sets[1].target_framework == parse_framework("net45")

    def test_dependency_without_version_is_tolerated(self) -> None:
        sets = parse_manifest(TEMPLATE).metadata.dependency_sets

        assert sets[1].dependencies[1] == PackageDependency("NoVersion", None)

    def test_framework_assemblies(self) -> None:
        assemblies = parse_manifest(TEMPLATE).metadata.framework_assemblies

        assert assemblies[0].target_frameworks == [parse_framework("net40"), parse_framework("net45")]
        assert assemblies[1].target_frameworks == [parse_framework("net45")]

    def test_references_and_files(self) -> None:
        manifest = parse_manifest(TEMPLATE)

        assert manifest.metadata.reference_sets[0].references == ["a.dll"]
        assert manifest.files == [ManifestFile("bin/a.dll", "lib/net45")]

    def test_missing_metadata_keeps_files(self) -> None:
        manifest = parse_manifest(
            '<package><files><file src="x.txt" target="content" /></files></package>'
        )

        assert manifest.metadata == ManifestMetadata()
        assert manifest.files == [ManifestFile("x.txt", "content")]

    def test_malformed_xml_raises(self) -> None:
        with pytest.raises(TemplateError, match="Malformed manifest document"):
            parse_manifest("<package><metadata>", source="broken.nuspec")

    def test_wrong_root_raises(self) -> None:
        with pytest.raises(TemplateError, match="Root element must be <package>"):
            parse_manifest("<project />")

    def test_entity_declarations_are_rejected(self) -> None:
        doc = (
            '<?xml version="1.0"?><!DOCTYPE package [<!ENTITY x "boom">]>'
            "<package><metadata><id>&x;</id></metadata></package>"
        )

        with pytest.raises(TemplateError):
            parse_manifest(doc)

    def test_read_manifest_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "template.nuspec"
        path.write_text(TEMPLATE, encoding="utf-8")

        assert read_manifest(path).metadata.id == "Contoso.Template"

    def test_read_manifest_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_manifest(tmp_path / "missing.nuspec")


class TestSerializeManifest:
    def _manifest(self) -> Manifest:
        net45 = parse_framework("net45")
        return Manifest(
            ManifestMetadata(
                id="Contoso.Widgets",
                version=parse_version("1.2"),
                authors=["Contoso", "Fabrikam"],
                description="Widgets",
                development_dependency=True,
                min_client_version="2.12",
                dependency_sets=[
                    DependencySet(None, [PackageDependency("Any.Pkg", None)]),
                    DependencySet(net45, [PackageDependency("PkgA", parse_version_range("[2.0, 3.0)"))]),
                ],
                framework_assemblies=[FrameworkAssemblyReference("System.Xml", [net45])],
                reference_sets=[ReferenceSet(net45, ["a.dll"])],
            ),
            files=[ManifestFile("bin/a.dll", "lib/net45", "**/*.pdb")],
        )

    def test_document_shape(self) -> None:
        content = serialize_manifest(self._manifest()).decode("utf-8")

        assert content.startswith("<?xml version='1.0' encoding='utf-8'?>\n")
        assert f'<package xmlns="{NUSPEC_NAMESPACE}">' in content
        assert '<metadata minClientVersion="2.12">' in content
        assert "<version>1.2.0</version>" in content
        assert "<authors>Contoso,Fabrikam</authors>" in content
        assert "<requireLicenseAcceptance>false</requireLicenseAcceptance>" in content
        assert "<developmentDependency>true</developmentDependency>" in content
        assert '<dependency id="Any.Pkg" version="0.0.0" />' in content
        assert '<group targetFramework="net45">' in content
        assert '<dependency id="PkgA" version="[2.0.0, 3.0.0)" />' in content
        assert '<frameworkAssembly assemblyName="System.Xml" targetFramework="net45" />' in content
        assert '<reference file="a.dll" />' in content
        assert '<file src="bin/a.dll" target="lib/net45" exclude="**/*.pdb" />' in content
        assert content.endswith("</package>\n")

    def test_optional_elements_are_omitted(self) -> None:
        content = serialize_manifest(Manifest()).decode("utf-8")

        assert "<dependencies" not in content
        assert "<files" not in content
        assert "<developmentDependency" not in content
        assert "<title" not in content

    def test_serialization_is_deterministic(self) -> None:
        assert serialize_manifest(self._manifest()) == serialize_manifest(self._manifest())

    def test_round_trip_preserves_content(self) -> None:
        content = serialize_manifest(self._manifest())

        assert serialize_manifest(parse_manifest(content)) == content

    def test_attributes_serialize_without_namespace_prefix(self) -> None:
        """属性付きの要素があっても既定の名前空間で書き出せること."""
        content = serialize_manifest(self._manifest()).decode("utf-8")

        assert "ns0:" not in content
        assert content.count("xmlns=") == 1

    def test_written_elements_are_in_nuspec_namespace(self) -> None:
        root = ET.fromstring(serialize_manifest(self._manifest()))

        assert root.tag == f"{{{NUSPEC_NAMESPACE}}}package"
        assert root.find(f"{{{NUSPEC_NAMESPACE}}}metadata").get("minClientVersion") == "2.12"
