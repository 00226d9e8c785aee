"""入力アイテムの正規化.

ビルドから渡される生の宣言（辞書）を型付きレコードに変換します。
コレクション自体が None の場合は空として扱います。
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .exceptions import ManifestError
from .frameworks import parse_framework
from .models import Dependency, FrameworkReference, ManifestFile, Reference
from .versioning import parse_version_range


def null_as_empty(items: Iterable[Mapping[str, Any]] | None) -> list[Mapping[str, Any]]:
    return list(items) if items is not None else []


def _text(value: object) -> str | None:
    if value is None:
        return None
    return str(value).strip()


def _require_id(item: Mapping[str, Any], kind: str) -> str:
    item_id = _text(item.get("id"))
    if not item_id:
        raise ManifestError(f"{kind} item requires a non-empty 'id': {dict(item)}")
    return item_id


def normalize_dependencies(items: Iterable[Mapping[str, Any]] | None) -> list[Dependency]:
    """依存関係アイテムを Dependency に変換する（入力順を保持）.

    Args:
        items: {"id", "version", "target_framework"} を持つ辞書のリスト

    Returns:
        Dependency のリスト。version が空なら version=None（制約なし）

    Raises:
        ManifestError: id が無い場合
        VersionParseError: version が不正な場合
        FrameworkParseError: target_framework の完全名が不正な場合
    """
    return [
        Dependency(
            id=_require_id(item, "Dependency"),
            target_framework=parse_framework(_text(item.get("target_framework"))),
            version=parse_version_range(_text(item.get("version"))),
        )
        for item in null_as_empty(items)
    ]


def normalize_references(items: Iterable[Mapping[str, Any]] | None) -> list[Reference]:
    return [
        Reference(
            file=_require_id(item, "Reference"),
            target_framework=parse_framework(_text(item.get("target_framework"))),
        )
        for item in null_as_empty(items)
    ]


def normalize_framework_references(
    items: Iterable[Mapping[str, Any]] | None,
) -> list[FrameworkReference]:
    return [
        FrameworkReference(
            assembly_name=_require_id(item, "Framework reference"),
            target_framework=parse_framework(_text(item.get("target_framework"))),
        )
        for item in null_as_empty(items)
    ]


def normalize_files(items: Iterable[Mapping[str, Any]] | None) -> list[ManifestFile]:
    """ファイルアイテムを ManifestFile に変換する.

    source 以外は省略可能（空文字として扱う）。
    """
    files: list[ManifestFile] = []
    for item in null_as_empty(items):
        source = _text(item.get("source"))
        if not source:
            raise ManifestError(f"File item requires a non-empty 'source': {dict(item)}")
        files.append(
            ManifestFile(
                source=source,
                target=_text(item.get("target")) or "",
                exclude=_text(item.get("exclude")) or "",
            )
        )
    return files
