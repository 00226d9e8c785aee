"""依存関係・参照・フレームワークアセンブリ・ファイルのグループ化とソート.

出力の再現性（同じ入力なら同じバイト列）のため、ソートは全て序数比較で行います。
序数比較は .NET の StringComparer.Ordinal と同じく UTF-16 コードユニット順です。
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

from .aggregate import aggregate_all
from .frameworks import TargetFramework
from .models import (
    SENTINEL_DEPENDENCY_ID,
    Dependency,
    DependencySet,
    FrameworkAssemblyReference,
    FrameworkReference,
    ManifestFile,
    PackageDependency,
    Reference,
    ReferenceSet,
)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def ordinal_key(value: str) -> bytes:
    """序数比較用のソートキー（大文字小文字を区別、ロケール非依存）."""
    return value.encode("utf-16-be", "surrogatepass")


def _simple_upper(char: str) -> str:
    # "ß" → "SS" のように文字数が変わる大文字化はしない（1文字単位の単純マッピングのみ）
    upper = char.upper()
    return upper if len(upper) == 1 else char


def ordinal_ignore_case_key(value: str) -> bytes:
    """大文字小文字を区別しない序数比較用のソートキー."""
    return ordinal_key("".join(_simple_upper(ch) for ch in value))


def framework_sort_key(framework: TargetFramework | None) -> tuple[bool, bytes]:
    """フレームワークのソートキー（None が先頭、以降は短いフォルダ名の序数比較）."""
    if framework is None:
        return (False, b"")
    return (True, ordinal_key(framework.get_short_folder_name()))


def group_by(items: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    """初出順を保ってグループ化する（グループ内の順序も入力順）."""
    groups: dict[K, list[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def build_dependency_sets(dependencies: Iterable[Dependency]) -> list[DependencySet]:
    """依存関係をフレームワーク別・ID別にまとめる.

    - "_._"（プレースホルダー）は除外する。除外の結果空になったグループも出力する
    - 同じ ID のバージョン範囲は入力順に aggregate_versions で畳み込む
    - グループ内は ID の序数順、グループはフレームワークの短いフォルダ名の序数順（None が先頭）

    Args:
        dependencies: 正規化済みの依存関係（入力順）

    Returns:
        DependencySet のリスト
    """
    dependency_sets: list[DependencySet] = []
    for framework, framework_dependencies in group_by(
        dependencies, lambda d: d.target_framework
    ).items():
        real_dependencies = [d for d in framework_dependencies if d.id != SENTINEL_DEPENDENCY_ID]
        # 安定ソートなので、同じ ID 内では入力順が保たれる
        real_dependencies.sort(key=lambda d: ordinal_key(d.id))
        package_dependencies = [
            PackageDependency(
                id=dependency_id,
                version_range=aggregate_all(d.version for d in same_id),
            )
            for dependency_id, same_id in group_by(real_dependencies, lambda d: d.id).items()
        ]
        dependency_sets.append(DependencySet(framework, package_dependencies))

    dependency_sets.sort(key=lambda s: framework_sort_key(s.target_framework))
    return dependency_sets


def build_reference_sets(references: Iterable[Reference]) -> list[ReferenceSet]:
    """参照をフレームワーク別にまとめる（ファイル名の序数順、重複は除去しない）."""
    return [
        ReferenceSet(
            framework,
            sorted((r.file for r in framework_references), key=ordinal_key),
        )
        for framework, framework_references in group_by(
            references, lambda r: r.target_framework
        ).items()
    ]


def build_framework_assemblies(
    framework_references: Iterable[FrameworkReference],
) -> list[FrameworkAssemblyReference]:
    """フレームワークアセンブリ参照をアセンブリ名の序数順に並べる（フレームワーク間のグループ化はしない）."""
    return [
        FrameworkAssemblyReference(
            assembly_name=fr.assembly_name,
            target_frameworks=[fr.target_framework] if fr.target_framework is not None else [],
        )
        for fr in sorted(framework_references, key=lambda fr: ordinal_key(fr.assembly_name))
    ]


def sort_manifest_files(files: Iterable[ManifestFile]) -> list[ManifestFile]:
    """ファイルを target の大文字小文字を区別しない序数順に並べる."""
    return sorted(files, key=lambda f: ordinal_ignore_case_key(f.target))
