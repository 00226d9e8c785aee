"""マニフェストのデータモデル.

- 入力レコード（正規化済みの依存関係・参照など）
- ManifestMetadata / Manifest（1回の生成処理で所有・更新される可変構造）
- ManifestInputs（生成処理への入力値一式）
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .frameworks import TargetFramework
from .versioning import NuGetVersion, VersionRange

# 「依存関係なし」を表すプレースホルダー ID（集約・出力から除外する）
SENTINEL_DEPENDENCY_ID = "_._"


@dataclass(frozen=True)
class Dependency:
    """正規化済みの依存関係宣言（集約前）."""

    id: str
    target_framework: TargetFramework | None
    version: VersionRange | None


@dataclass(frozen=True)
class Reference:
    """正規化済みの参照宣言."""

    file: str
    target_framework: TargetFramework | None


@dataclass(frozen=True)
class FrameworkReference:
    """正規化済みのフレームワークアセンブリ参照宣言."""

    assembly_name: str
    target_framework: TargetFramework | None


@dataclass(frozen=True)
class PackageDependency:
    """出力用の依存関係（version_range が None なら任意のバージョン）."""

    id: str
    version_range: VersionRange | None = None


@dataclass
class DependencySet:
    target_framework: TargetFramework | None
    dependencies: list[PackageDependency] = field(default_factory=list)


@dataclass
class ReferenceSet:
    target_framework: TargetFramework | None
    references: list[str] = field(default_factory=list)


@dataclass
class FrameworkAssemblyReference:
    """フレームワークアセンブリ参照.

    生成時は常にフレームワーク1件。テンプレート由来の場合は複数件を持ちうる。
    """

    assembly_name: str
    target_frameworks: list[TargetFramework] = field(default_factory=list)


@dataclass(frozen=True)
class ManifestFile:
    source: str
    target: str = ""
    exclude: str = ""


@dataclass
class ManifestMetadata:
    """マニフェストの metadata 要素.

    テンプレートから読み込まれる（部分的に埋まっている場合あり）か、空で生成され、
    マージ処理でフィールド単位に更新される。
    """

    id: str | None = None
    version: NuGetVersion | None = None
    title: str | None = None
    authors: list[str] = field(default_factory=list)
    owners: list[str] = field(default_factory=list)
    description: str | None = None
    license_url: str | None = None
    icon_url: str | None = None
    project_url: str | None = None
    summary: str | None = None
    tags: str | None = None
    language: str | None = None
    copyright: str | None = None
    release_notes: str | None = None
    min_client_version: str | None = None
    require_license_acceptance: bool = False
    development_dependency: bool = False
    dependency_sets: list[DependencySet] = field(default_factory=list)
    framework_assemblies: list[FrameworkAssemblyReference] = field(default_factory=list)
    reference_sets: list[ReferenceSet] = field(default_factory=list)


@dataclass
class Manifest:
    metadata: ManifestMetadata = field(default_factory=ManifestMetadata)
    files: list[ManifestFile] = field(default_factory=list)


@dataclass
class ManifestInputs:
    """生成処理への入力値.

    スカラー値は文字列のまま受け取り、マージ時に変換・検証する。
    各アイテムは生の辞書（例: {"id": "PkgA", "version": "[1.0, )", "target_framework": "net45"}）。

    Attributes:
        authors, owners: ";" 区切りの文字列
        dependencies: id / version / target_framework
        references: id（ファイル名） / target_framework
        framework_references: id（アセンブリ名） / target_framework
        files: source / target / exclude
    """

    id: str | None = None
    version: str | None = None
    title: str | None = None
    authors: str | None = None
    owners: str | None = None
    description: str | None = None
    release_notes: str | None = None
    summary: str | None = None
    language: str | None = None
    project_url: str | None = None
    icon_url: str | None = None
    license_url: str | None = None
    copyright: str | None = None
    tags: str | None = None
    min_client_version: str | None = None
    require_license_acceptance: bool = False
    development_dependency: bool = False
    dependencies: list[dict[str, Any]] | None = None
    references: list[dict[str, Any]] | None = None
    framework_references: list[dict[str, Any]] | None = None
    files: list[dict[str, Any]] | None = None
