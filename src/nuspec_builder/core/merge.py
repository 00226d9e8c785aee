"""マニフェストのマージ.

既存（テンプレート由来 or 空）の ManifestMetadata に、生成入力を上書き・追記します。

- スカラー値: 新しい値が空でなければ無条件に上書き（後勝ち）
- requireLicenseAcceptance / developmentDependency: 論理 OR（一度 True なら False に戻さない）
- コレクション（依存関係・フレームワークアセンブリ・参照・ファイル）: 既存の後ろに追記

コレクションはテンプレートとの間で重複除去しない。テンプレートと生成側に同じフレームワークの
グループがあれば、出力には別々のグループとして2つ現れる（意図した挙動）。
"""

from __future__ import annotations

from typing import TypeVar
from urllib.parse import urlparse

from loguru import logger

from .exceptions import ManifestError
from .grouping import (
    build_dependency_sets,
    build_framework_assemblies,
    build_reference_sets,
    sort_manifest_files,
)
from .models import Manifest, ManifestInputs
from .normalize import (
    normalize_dependencies,
    normalize_files,
    normalize_framework_references,
    normalize_references,
)
from .versioning import parse_version

T = TypeVar("T")


def _has_value(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, tuple)):
        return len(value) > 0
    return True


def update_member(current: T, new: T | None) -> T:
    """new が空でなければ new、そうでなければ current を返す."""
    return new if _has_value(new) else current


def split_list(value: str | None) -> list[str] | None:
    """";" 区切りの文字列をリストにする（空要素は捨てる）."""
    if value is None:
        return None
    return [part.strip() for part in value.split(";") if part.strip()]


def parse_url(value: str | None, field_name: str) -> str | None:
    """URL を検証する（絶対 URI のみ許可）.

    Raises:
        ManifestError: スキームが無い（相対 URL）場合
    """
    if not value:
        return None
    parsed = urlparse(value)
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        raise ManifestError(f"{field_name} must be an absolute URI: '{value}'")
    return value


def parse_min_client_version(value: str | None) -> str | None:
    if not value:
        return None
    parse_version(value)
    return value.strip()


def merge_inputs(manifest: Manifest, inputs: ManifestInputs) -> Manifest:
    """生成入力をマニフェストに適用する（manifest をその場で更新して返す）.

    Args:
        manifest: テンプレートから読み込んだマニフェスト、または空のマニフェスト
        inputs: 生成入力

    Returns:
        更新後のマニフェスト（引数と同じオブジェクト）

    Raises:
        VersionParseError: version / min_client_version / 依存関係の version が不正な場合
        FrameworkParseError: target_framework の完全名が不正な場合
        ManifestError: URL が不正、またはアイテムに必須値が無い場合
    """
    metadata = manifest.metadata

    metadata.authors = update_member(metadata.authors, split_list(inputs.authors))
    metadata.copyright = update_member(metadata.copyright, inputs.copyright)
    metadata.description = update_member(metadata.description, inputs.description)
    metadata.development_dependency |= inputs.development_dependency
    metadata.icon_url = update_member(metadata.icon_url, parse_url(inputs.icon_url, "icon_url"))
    metadata.id = update_member(metadata.id, inputs.id)
    metadata.language = update_member(metadata.language, inputs.language)
    metadata.license_url = update_member(
        metadata.license_url, parse_url(inputs.license_url, "license_url")
    )
    metadata.min_client_version = update_member(
        metadata.min_client_version, parse_min_client_version(inputs.min_client_version)
    )
    metadata.owners = update_member(metadata.owners, split_list(inputs.owners))
    metadata.project_url = update_member(
        metadata.project_url, parse_url(inputs.project_url, "project_url")
    )
    metadata.release_notes = update_member(metadata.release_notes, inputs.release_notes)
    metadata.require_license_acceptance |= inputs.require_license_acceptance
    metadata.summary = update_member(metadata.summary, inputs.summary)
    metadata.tags = update_member(metadata.tags, inputs.tags)
    metadata.title = update_member(metadata.title, inputs.title)
    metadata.version = update_member(
        metadata.version, parse_version(inputs.version) if inputs.version else None
    )

    dependency_sets = build_dependency_sets(normalize_dependencies(inputs.dependencies))
    framework_assemblies = build_framework_assemblies(
        normalize_framework_references(inputs.framework_references)
    )
    reference_sets = build_reference_sets(normalize_references(inputs.references))
    files = sort_manifest_files(normalize_files(inputs.files))

    metadata.dependency_sets.extend(dependency_sets)
    metadata.framework_assemblies.extend(framework_assemblies)
    metadata.reference_sets.extend(reference_sets)
    manifest.files.extend(files)

    logger.debug(
        f"Merged inputs: {len(dependency_sets)} dependency set(s), "
        f"{len(framework_assemblies)} framework assembly(ies), "
        f"{len(reference_sets)} reference set(s), {len(files)} file(s)"
    )
    return manifest
