"""生成設定（YAML）の読み込み.

メタデータのスカラー値と、依存関係・参照・フレームワーク参照・ファイルのアイテム一覧を
1つの YAML にまとめて渡せるようにします。

形式:
    metadata:
      id: Contoso.Widgets
      version: "1.2.0"
      authors: Contoso;Fabrikam
      require_license_acceptance: false
    dependencies:
      - {id: PkgA, version: "[1.0.0, )", target_framework: net45}
    references:
      - {id: Contoso.Widgets.dll, target_framework: net45}
    framework_references:
      - {id: System.Xml, target_framework: net45}
    files:
      - {source: bin/a.dll, target: lib/net45/a.dll}
"""

from __future__ import annotations

from dataclasses import fields, replace
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from nuspec_builder.core.exceptions import ConfigError
from nuspec_builder.core.models import ManifestInputs

ITEM_SECTIONS = ("dependencies", "references", "framework_references", "files")
BOOLEAN_KEYS = ("require_license_acceptance", "development_dependency")
METADATA_KEYS = tuple(
    f.name for f in fields(ManifestInputs) if f.name not in ITEM_SECTIONS
)


def _load_items(section: str, value: Any) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"Section '{section}' must be a list, got {type(value).__name__}")
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigError(
                f"Item {index} in '{section}' must be a mapping, got {type(item).__name__}"
            )
    return value


def _load_metadata(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section 'metadata' must be a mapping, got {type(value).__name__}")

    unknown = sorted(set(value) - set(METADATA_KEYS))
    if unknown:
        raise ConfigError(f"Unknown metadata keys: {', '.join(map(str, unknown))}")

    metadata: dict[str, Any] = {}
    for key, item in value.items():
        if key in BOOLEAN_KEYS:
            if not isinstance(item, bool):
                raise ConfigError(f"Metadata '{key}' must be true or false, got {item!r}")
            metadata[key] = item
        elif item is not None:
            if isinstance(item, float):
                # YAML は 1.10 を 1.1 に変換してしまう
                logger.warning(f"Metadata '{key}' was parsed as a number ({item}); quote it in YAML")
            metadata[key] = str(item)
    return metadata


def load_generation_config(config_path: Path | str) -> ManifestInputs:
    """YAML の生成設定を読み込む.

    Args:
        config_path: 設定ファイルのパス

    Returns:
        生成入力

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ConfigError: YAML が不正、または形式が不正な場合
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Generation config not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in generation config: {config_path}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Generation config must contain a mapping, got {type(data).__name__}")

    unknown = sorted(set(data) - {"metadata", *ITEM_SECTIONS})
    if unknown:
        raise ConfigError(f"Unknown config sections: {', '.join(map(str, unknown))}")

    inputs = ManifestInputs(
        **_load_metadata(data.get("metadata")),
        **{section: _load_items(section, data.get(section)) for section in ITEM_SECTIONS},
    )
    logger.info(
        f"Loaded generation config from {config_path}: "
        + ", ".join(f"{len(getattr(inputs, s))} {s}" for s in ITEM_SECTIONS)
    )
    return inputs


def apply_overrides(inputs: ManifestInputs, overrides: dict[str, Any]) -> ManifestInputs:
    """CLI 引数などで指定された値を上書きする.

    None の値は無視する。真偽値は OR（設定で True なら CLI で False に戻さない）。
    """
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key in BOOLEAN_KEYS:
            changes[key] = getattr(inputs, key) or bool(value)
        else:
            changes[key] = value
    return replace(inputs, **changes)
