"""Unit tests for manifest merge functionality."""

import pytest

from nuspec_builder.core.exceptions import ManifestError, VersionParseError
from nuspec_builder.core.frameworks import parse_framework
from nuspec_builder.core.merge import merge_inputs, split_list, update_member
from nuspec_builder.core.models import (
    DependencySet,
    Manifest,
    ManifestFile,
    ManifestInputs,
    ManifestMetadata,
    PackageDependency,
)
from nuspec_builder.core.versioning import parse_version


class TestUpdateMember:
    def test_non_empty_value_overwrites(self) -> None:
        assert update_member("old", "new") == "new"
        assert update_member(["a"], ["b"]) == ["b"]

    def test_empty_values_keep_current(self) -> None:
        assert update_member("old", None) == "old"
        assert update_member("old", "") == "old"
        assert update_member(["a"], []) == ["a"]


class TestSplitList:
    def test_semicolon_separated(self) -> None:
        assert split_list("Contoso; Fabrikam;") == ["Contoso", "Fabrikam"]

    def test_none(self) -> None:
        assert split_list(None) is None


class TestMergeScalars:
    """スカラー値のマージテスト."""

    def test_fresh_manifest_receives_values(self) -> None:
        manifest = merge_inputs(
            Manifest(),
            ManifestInputs(
                id="Contoso.Widgets",
                version="1.2",
                title="Widgets",
                authors="Contoso;Fabrikam",
                owners="Contoso",
                description="Widgets for everyone",
                license_url="https://example.com/license",
                project_url="https://example.com/",
                icon_url="https://example.com/icon.png",
                tags="widgets ui",
                min_client_version="2.12",
            ),
        )
        metadata = manifest.metadata

        assert metadata.id == "Contoso.Widgets"
        assert metadata.version == parse_version("1.2.0")
        assert metadata.authors == ["Contoso", "Fabrikam"]
        assert metadata.owners == ["Contoso"]
        assert metadata.license_url == "https://example.com/license"
        assert metadata.min_client_version == "2.12"

    def test_new_values_overwrite_template_values(self) -> None:
        manifest = Manifest(ManifestMetadata(id="Old.Id", title="Old", summary="kept"))

        merge_inputs(manifest, ManifestInputs(id="New.Id", title="New"))

        assert manifest.metadata.id == "New.Id"
        assert manifest.metadata.title == "New"
        # 入力が空のフィールドはテンプレートの値を保持
        assert manifest.metadata.summary == "kept"

    def test_empty_strings_do_not_overwrite(self) -> None:
        manifest = Manifest(ManifestMetadata(description="template", authors=["A"]))

        merge_inputs(manifest, ManifestInputs(description="", authors=""))

        assert manifest.metadata.description == "template"
        assert manifest.metadata.authors == ["A"]

    def test_require_license_acceptance_is_never_downgraded(self) -> None:
        manifest = Manifest(ManifestMetadata(require_license_acceptance=True))

        merge_inputs(manifest, ManifestInputs(require_license_acceptance=False))

        assert manifest.metadata.require_license_acceptance is True

    def test_boolean_flags_are_ored(self) -> None:
        manifest = Manifest(ManifestMetadata())

        merge_inputs(manifest, ManifestInputs(development_dependency=True))

        assert manifest.metadata.development_dependency is True
        assert manifest.metadata.require_license_acceptance is False

    def test_invalid_version_raises(self) -> None:
        with pytest.raises(VersionParseError):
            merge_inputs(Manifest(), ManifestInputs(version="one.two"))

    def test_invalid_min_client_version_raises(self) -> None:
        with pytest.raises(VersionParseError):
            merge_inputs(Manifest(), ManifestInputs(min_client_version="latest"))

    def test_relative_url_raises(self) -> None:
        with pytest.raises(ManifestError, match="license_url must be an absolute URI"):
            merge_inputs(Manifest(), ManifestInputs(license_url="LICENSE.txt"))


class TestMergeCollections:
    """コレクションのマージテスト（追記・重複除去なし）."""

    def test_template_sets_are_kept_and_new_sets_appended(self) -> None:
        net45 = parse_framework("net45")
        manifest = Manifest(
            ManifestMetadata(
                dependency_sets=[DependencySet(net45, [PackageDependency("Template.Pkg")])]
            )
        )

        merge_inputs(
            manifest,
            ManifestInputs(
                dependencies=[{"id": "PkgA", "version": "1.0", "target_framework": "net46"}]
            ),
        )

        sets = manifest.metadata.dependency_sets
        assert [str(s.target_framework) for s in sets] == ["net45", "net46"]
        assert sets[0].dependencies[0].id == "Template.Pkg"

    def test_same_framework_is_not_merged_across_template_boundary(self) -> None:
        net45 = parse_framework("net45")
        manifest = Manifest(
            ManifestMetadata(dependency_sets=[DependencySet(net45, [PackageDependency("PkgA")])])
        )

        merge_inputs(
            manifest,
            ManifestInputs(
                dependencies=[{"id": "PkgA", "version": "2.0", "target_framework": "net45"}]
            ),
        )

        sets = manifest.metadata.dependency_sets
        assert len(sets) == 2
        assert sets[0].target_framework == sets[1].target_framework == net45

    def test_files_are_appended_after_template_files(self) -> None:
        manifest = Manifest(files=[ManifestFile("template.txt", "z/template.txt")])

        merge_inputs(
            manifest,
            ManifestInputs(
                files=[
                    {"source": "b.dll", "target": "lib/b.dll"},
                    {"source": "a.dll", "target": "lib/A.dll"},
                ]
            ),
        )

        assert [f.source for f in manifest.files] == ["template.txt", "a.dll", "b.dll"]

    def test_references_and_framework_assemblies(self) -> None:
        manifest = merge_inputs(
            Manifest(),
            ManifestInputs(
                references=[{"id": "b.dll", "target_framework": "net45"}, {"id": "a.dll", "target_framework": "net45"}],
                framework_references=[{"id": "System.Xml", "target_framework": "net45"}],
            ),
        )

        assert manifest.metadata.reference_sets[0].references == ["a.dll", "b.dll"]
        assert manifest.metadata.framework_assemblies[0].assembly_name == "System.Xml"

    def test_none_collections_add_nothing(self) -> None:
        manifest = merge_inputs(Manifest(), ManifestInputs())

        assert manifest.metadata.dependency_sets == []
        assert manifest.metadata.framework_assemblies == []
        assert manifest.metadata.reference_sets == []
        assert manifest.files == []
