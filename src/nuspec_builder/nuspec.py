""".nuspec（XML）の読み込みと書き出し.

テンプレートの読み込みには defusedxml を使い（外部エンティティ展開を無効化）、
出力の組み立て・整形には標準の xml.etree.ElementTree を使います。

出力は常に同じ名前空間・要素順・インデントで書き出すため、
同じ Manifest からは同じバイト列が得られます（差分検出に使う）。
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import defusedxml
import defusedxml.ElementTree as DefusedET
from loguru import logger

from nuspec_builder.core.exceptions import TemplateError
from nuspec_builder.core.frameworks import TargetFramework, parse_framework
from nuspec_builder.core.models import (
    DependencySet,
    FrameworkAssemblyReference,
    Manifest,
    ManifestFile,
    ManifestMetadata,
    PackageDependency,
    ReferenceSet,
)
from nuspec_builder.core.versioning import format_version_range, parse_version, parse_version_range

NUSPEC_NAMESPACE = "http://schemas.microsoft.com/packaging/2010/07/nuspec.xsd"


def _local_name(tag: str) -> str:
    # テンプレートは名前空間の版が違う（2011/08 など）か、名前空間無しの場合がある
    return tag.rsplit("}", 1)[-1]


def _text(element: ET.Element) -> str | None:
    text = (element.text or "").strip()
    return text or None


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


# ---------------------------------------------------------------------------
# 読み込み
# ---------------------------------------------------------------------------


def _parse_dependency(element: ET.Element, source: str | None) -> PackageDependency:
    dependency_id = element.get("id")
    if not dependency_id:
        raise TemplateError("Dependency element without 'id' attribute", source)
    # version 属性が無い依存関係は「任意のバージョン」として通す
    return PackageDependency(dependency_id, parse_version_range(element.get("version")))


def _parse_dependencies(element: ET.Element, source: str | None) -> list[DependencySet]:
    dependency_sets: list[DependencySet] = []
    flat: DependencySet | None = None
    for child in element:
        name = _local_name(child.tag)
        if name == "group":
            dependency_sets.append(
                DependencySet(
                    parse_framework(child.get("targetFramework")),
                    [
                        _parse_dependency(d, source)
                        for d in child
                        if _local_name(d.tag) == "dependency"
                    ],
                )
            )
        elif name == "dependency":
            if flat is None:
                flat = DependencySet(None)
                dependency_sets.append(flat)
            flat.dependencies.append(_parse_dependency(child, source))
    return dependency_sets


def _parse_reference_file(element: ET.Element, source: str | None) -> str:
    file_name = element.get("file")
    if not file_name:
        raise TemplateError("Reference element without 'file' attribute", source)
    return file_name


def _parse_references(element: ET.Element, source: str | None) -> list[ReferenceSet]:
    reference_sets: list[ReferenceSet] = []
    flat: ReferenceSet | None = None
    for child in element:
        name = _local_name(child.tag)
        if name == "group":
            reference_sets.append(
                ReferenceSet(
                    parse_framework(child.get("targetFramework")),
                    [
                        _parse_reference_file(r, source)
                        for r in child
                        if _local_name(r.tag) == "reference"
                    ],
                )
            )
        elif name == "reference":
            if flat is None:
                flat = ReferenceSet(None)
                reference_sets.append(flat)
            flat.references.append(_parse_reference_file(child, source))
    return reference_sets


def _parse_framework_list(value: str | None) -> list[TargetFramework]:
    if not value:
        return []
    # 完全名（".NETFramework,Version=v4.5"）はカンマを含むので分割しない
    labels = [value] if "version=" in value.lower() else _split_csv(value)
    frameworks = [parse_framework(label) for label in labels]
    return [f for f in frameworks if f is not None]


def _parse_framework_assemblies(
    element: ET.Element, source: str | None
) -> list[FrameworkAssemblyReference]:
    assemblies: list[FrameworkAssemblyReference] = []
    for child in element:
        if _local_name(child.tag) != "frameworkAssembly":
            continue
        assembly_name = child.get("assemblyName")
        if not assembly_name:
            raise TemplateError("frameworkAssembly element without 'assemblyName'", source)
        assemblies.append(
            FrameworkAssemblyReference(
                assembly_name, _parse_framework_list(child.get("targetFramework"))
            )
        )
    return assemblies


def _parse_files(element: ET.Element, source: str | None) -> list[ManifestFile]:
    files: list[ManifestFile] = []
    for child in element:
        if _local_name(child.tag) != "file":
            continue
        src = child.get("src")
        if not src:
            raise TemplateError("File element without 'src' attribute", source)
        files.append(ManifestFile(src, child.get("target") or "", child.get("exclude") or ""))
    return files


def _is_true(element: ET.Element) -> bool:
    return (_text(element) or "").lower() == "true"


def _parse_metadata(element: ET.Element, source: str | None) -> ManifestMetadata:
    metadata = ManifestMetadata(min_client_version=element.get("minClientVersion"))

    for child in element:
        name = _local_name(child.tag)
        value = _text(child)
        if name == "id":
            metadata.id = value
        elif name == "version":
            metadata.version = parse_version(value) if value else None
        elif name == "title":
            metadata.title = value
        elif name == "authors":
            metadata.authors = _split_csv(value)
        elif name == "owners":
            metadata.owners = _split_csv(value)
        elif name == "description":
            metadata.description = value
        elif name == "licenseUrl":
            metadata.license_url = value
        elif name == "iconUrl":
            metadata.icon_url = value
        elif name == "projectUrl":
            metadata.project_url = value
        elif name == "summary":
            metadata.summary = value
        elif name == "tags":
            metadata.tags = value
        elif name == "language":
            metadata.language = value
        elif name == "copyright":
            metadata.copyright = value
        elif name == "releaseNotes":
            metadata.release_notes = value
        elif name == "requireLicenseAcceptance":
            metadata.require_license_acceptance = _is_true(child)
        elif name == "developmentDependency":
            metadata.development_dependency = _is_true(child)
        elif name == "dependencies":
            metadata.dependency_sets.extend(_parse_dependencies(child, source))
        elif name == "frameworkAssemblies":
            metadata.framework_assemblies.extend(_parse_framework_assemblies(child, source))
        elif name == "references":
            metadata.reference_sets.extend(_parse_references(child, source))
        else:
            logger.warning(f"Ignoring unsupported metadata element <{name}>")
    return metadata


def _manifest_from_root(root: ET.Element, source: str | None) -> Manifest:
    if _local_name(root.tag) != "package":
        raise TemplateError(f"Root element must be <package>, got <{_local_name(root.tag)}>", source)

    metadata: ManifestMetadata | None = None
    files: list[ManifestFile] = []
    for child in root:
        name = _local_name(child.tag)
        if name == "metadata":
            metadata = _parse_metadata(child, source)
        elif name == "files":
            files.extend(_parse_files(child, source))

    if metadata is None:
        # metadata の無いテンプレートは files だけ引き継ぐ
        logger.warning(f"Template has no <metadata> element, starting from empty metadata ({source})")
        metadata = ManifestMetadata()
    return Manifest(metadata=metadata, files=files)


def parse_manifest(content: bytes | str, source: str | None = None) -> Manifest:
    """.nuspec の内容を Manifest に変換する.

    Args:
        content: XML 文字列またはバイト列
        source: エラーメッセージ用の由来（ファイルパスなど）

    Raises:
        TemplateError: XML が不正、または構造が .nuspec として不正な場合
        VersionParseError: version が不正な場合
        FrameworkParseError: targetFramework の完全名が不正な場合
    """
    try:
        root = DefusedET.fromstring(content)
    except (ET.ParseError, defusedxml.DefusedXmlException) as e:
        raise TemplateError(f"Malformed manifest document ({e})", source) from e
    return _manifest_from_root(root, source)


def read_manifest(path: Path | str) -> Manifest:
    """テンプレート .nuspec ファイルを読み込む.

    Raises:
        OSError: ファイルが読めない場合
        TemplateError: 内容が不正な場合
    """
    path = Path(path)
    with open(path, "rb") as f:
        content = f.read()
    manifest = parse_manifest(content, str(path))
    logger.info(f"Loaded template manifest from {path}")
    return manifest


# ---------------------------------------------------------------------------
# 書き出し
# ---------------------------------------------------------------------------


def _add_text(parent: ET.Element, tag: str, value: str | None) -> None:
    if value:
        ET.SubElement(parent, tag).text = value


def _framework_attrs(framework: TargetFramework | None) -> dict[str, str]:
    if framework is None:
        return {}
    return {"targetFramework": framework.get_short_folder_name()}


def _build_metadata(metadata: ManifestMetadata) -> ET.Element:
    attrs = {"minClientVersion": metadata.min_client_version} if metadata.min_client_version else {}
    element = ET.Element("metadata", attrs)

    _add_text(element, "id", metadata.id)
    _add_text(element, "version", str(metadata.version) if metadata.version else None)
    _add_text(element, "title", metadata.title)
    _add_text(element, "authors", ",".join(metadata.authors))
    _add_text(element, "owners", ",".join(metadata.owners))
    _add_text(element, "licenseUrl", metadata.license_url)
    _add_text(element, "projectUrl", metadata.project_url)
    _add_text(element, "iconUrl", metadata.icon_url)
    _add_text(
        element,
        "requireLicenseAcceptance",
        "true" if metadata.require_license_acceptance else "false",
    )
    if metadata.development_dependency:
        _add_text(element, "developmentDependency", "true")
    _add_text(element, "description", metadata.description)
    _add_text(element, "summary", metadata.summary)
    _add_text(element, "releaseNotes", metadata.release_notes)
    _add_text(element, "copyright", metadata.copyright)
    _add_text(element, "language", metadata.language)
    _add_text(element, "tags", metadata.tags)

    if metadata.dependency_sets:
        dependencies = ET.SubElement(element, "dependencies")
        for dependency_set in metadata.dependency_sets:
            group = ET.SubElement(
                dependencies, "group", _framework_attrs(dependency_set.target_framework)
            )
            for dependency in dependency_set.dependencies:
                ET.SubElement(
                    group,
                    "dependency",
                    {
                        "id": dependency.id,
                        "version": format_version_range(dependency.version_range),
                    },
                )

    if metadata.framework_assemblies:
        assemblies = ET.SubElement(element, "frameworkAssemblies")
        for assembly in metadata.framework_assemblies:
            attrs = {"assemblyName": assembly.assembly_name}
            if assembly.target_frameworks:
                attrs["targetFramework"] = ", ".join(
                    f.get_short_folder_name() for f in assembly.target_frameworks
                )
            ET.SubElement(assemblies, "frameworkAssembly", attrs)

    if metadata.reference_sets:
        references = ET.SubElement(element, "references")
        for reference_set in metadata.reference_sets:
            group = ET.SubElement(
                references, "group", _framework_attrs(reference_set.target_framework)
            )
            for file_name in reference_set.references:
                ET.SubElement(group, "reference", {"file": file_name})

    return element


def build_document(manifest: Manifest) -> ET.Element:
    """Manifest から <package> 要素を組み立てる."""
    # 属性は名前空間無しなので、既定の名前空間はルートの xmlns 属性として書く
    root = ET.Element("package", {"xmlns": NUSPEC_NAMESPACE})
    root.append(_build_metadata(manifest.metadata))

    if manifest.files:
        files = ET.SubElement(root, "files")
        for manifest_file in manifest.files:
            attrs = {"src": manifest_file.source}
            if manifest_file.target:
                attrs["target"] = manifest_file.target
            if manifest_file.exclude:
                attrs["exclude"] = manifest_file.exclude
            ET.SubElement(files, "file", attrs)
    return root


def serialize_manifest(manifest: Manifest) -> bytes:
    """Manifest を正規形の UTF-8 バイト列に変換する（XML 宣言付き、2スペースインデント、末尾改行）."""
    root = build_document(manifest)
    ET.indent(root, space="  ")
    content = ET.tostring(root, encoding="utf-8", xml_declaration=True)
    return content + b"\n"
