"""バージョン範囲の集約.

同じパッケージ ID に対する複数のバージョン制約を、全てを満たす最も狭い1つの範囲にまとめます。
入力順に左畳み込み（functools.reduce）で適用されるため、呼び出し側は入力順を保持すること。

ルール:
    - 下限: より大きい下限が勝つ。等しい場合は包含フラグの AND（どちらかが除外なら除外）
    - 上限: より小さい上限が勝つ。等しい場合は包含フラグの AND
    - 上下限とも無くなった場合は None（制約なし）
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from functools import reduce

from .versioning import VersionRange


def _set_min_version(target: VersionRange, source: VersionRange | None) -> VersionRange:
    if source is None or source.min_version is None:
        return target

    if target.min_version is None or target.min_version < source.min_version:
        return replace(
            target,
            min_version=source.min_version,
            is_min_inclusive=source.is_min_inclusive,
        )

    if target.min_version == source.min_version:
        return replace(
            target,
            is_min_inclusive=target.is_min_inclusive and source.is_min_inclusive,
        )

    return target


def _set_max_version(target: VersionRange, source: VersionRange | None) -> VersionRange:
    if source is None or source.max_version is None:
        return target

    if target.max_version is None or target.max_version > source.max_version:
        return replace(
            target,
            max_version=source.max_version,
            is_max_inclusive=source.is_max_inclusive,
        )

    if target.max_version == source.max_version:
        return replace(
            target,
            is_max_inclusive=target.is_max_inclusive and source.is_max_inclusive,
        )

    return target


def aggregate_versions(
    aggregate: VersionRange | None,
    next_range: VersionRange | None,
) -> VersionRange | None:
    """2つのバージョン範囲を1つにまとめる.

    Args:
        aggregate: これまでの集約結果（None は制約なし）
        next_range: 次の範囲（None は制約なし）

    Returns:
        集約後の範囲。上下限とも無い場合は None

    Examples:
        >>> from nuspec_builder.core.versioning import parse_version_range
        >>> str(aggregate_versions(parse_version_range("1.0.0"), parse_version_range("[2.0.0, 3.0.0)")))
        '[2.0.0, 3.0.0)'
    """
    version_range = VersionRange()
    version_range = _set_min_version(version_range, aggregate)
    version_range = _set_min_version(version_range, next_range)
    version_range = _set_max_version(version_range, aggregate)
    version_range = _set_max_version(version_range, next_range)

    if version_range.is_unbounded:
        return None
    return version_range


def aggregate_all(ranges: Iterable[VersionRange | None]) -> VersionRange | None:
    """範囲の列を入力順に畳み込む.

    要素が1つの場合はそのまま返す（集約関数は呼ばない）。空の場合は None。
    """
    ranges = list(ranges)
    if not ranges:
        return None
    return reduce(aggregate_versions, ranges)
