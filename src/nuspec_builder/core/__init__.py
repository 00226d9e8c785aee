""".nuspec 生成のコア処理群.

- バージョン／バージョン範囲、ターゲットフレームワークの解析
- 入力アイテムの正規化
- バージョン範囲の集約（同じパッケージ ID の制約を1つにまとめる）
- グループ化・ソート、マニフェストへのマージ
"""

from .aggregate import aggregate_all, aggregate_versions
from .frameworks import TargetFramework, parse_framework
from .grouping import (
    build_dependency_sets,
    build_framework_assemblies,
    build_reference_sets,
    sort_manifest_files,
)
from .merge import merge_inputs
from .versioning import NuGetVersion, VersionRange, parse_version, parse_version_range

__all__ = [
    "NuGetVersion",
    "VersionRange",
    "parse_version",
    "parse_version_range",
    "TargetFramework",
    "parse_framework",
    "aggregate_versions",
    "aggregate_all",
    "build_dependency_sets",
    "build_reference_sets",
    "build_framework_assemblies",
    "sort_manifest_files",
    "merge_inputs",
]
