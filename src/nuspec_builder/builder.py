""".nuspec ジェネレーター（オーケストレーター）.

テンプレート（任意）の読み込み → 入力のマージ → 正規形へのシリアライズ → 差分がある場合のみ書き出し、
の一連を担う。書き出しは全体の組み立てが成功した後にだけ行うため、失敗時に中途半端な出力は残らない。

生成中の例外は generate_nuspec で一度だけ捕捉してログに出し、False を返す。
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from nuspec_builder.config import apply_overrides, load_generation_config
from nuspec_builder.core.merge import merge_inputs
from nuspec_builder.core.models import Manifest, ManifestInputs, ManifestMetadata
from nuspec_builder.nuspec import read_manifest, serialize_manifest


def create_manifest(inputs: ManifestInputs, input_path: Path | str | None = None) -> Manifest:
    """テンプレートと生成入力からマニフェストを組み立てる.

    Args:
        inputs: 生成入力
        input_path: テンプレート .nuspec のパス（None / 空なら空のマニフェストから開始）

    Returns:
        マージ済みのマニフェスト
    """
    if input_path:
        manifest = read_manifest(input_path)
    else:
        manifest = Manifest(ManifestMetadata())
    return merge_inputs(manifest, inputs)


def is_different(content: bytes, output_path: Path | str) -> bool:
    """既存の出力ファイルと内容が異なるか判定する（ファイルが無ければ常に True）."""
    output_path = Path(output_path)
    if not output_path.exists():
        return True
    return output_path.read_bytes() != content


def write_nuspec_file(manifest: Manifest, output_path: Path | str) -> bool:
    """マニフェストを書き出す（内容が同じならスキップ）.

    Args:
        manifest: 書き出すマニフェスト
        output_path: 出力パス

    Returns:
        書き出した場合 True、内容が同一でスキップした場合 False
    """
    output_path = Path(output_path)
    content = serialize_manifest(manifest)

    if not is_different(content, output_path):
        logger.info(f"Skipping generation of .nuspec because contents are identical: {output_path}")
        return False

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(content)

    logger.info(f"Manifest written to {output_path}")
    return True


def generate_nuspec(
    inputs: ManifestInputs,
    output_path: Path | str,
    input_path: Path | str | None = None,
) -> bool:
    """.nuspec を生成する.

    Args:
        inputs: 生成入力
        output_path: 出力 .nuspec のパス
        input_path: テンプレート .nuspec のパス（任意）

    Returns:
        成功した場合 True（内容が同一で書き出しをスキップした場合も成功）
    """
    try:
        manifest = create_manifest(inputs, input_path)
        write_nuspec_file(manifest, output_path)
    except Exception:
        logger.exception(f"Failed to generate {output_path}")
        return False
    return True


def main(argv: list[str] | None = None) -> int:
    """CLI エントリポイント."""
    parser = argparse.ArgumentParser(description="Generate a NuGet .nuspec manifest")
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Output .nuspec file path",
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Optional template .nuspec to start from",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Generation config YAML (metadata and dependency/reference/file items)",
    )
    parser.add_argument("--id", default=None, help="Package id")
    parser.add_argument("--version", default=None, help="Package version")
    parser.add_argument("--title", default=None, help="Package title")
    parser.add_argument("--authors", default=None, help="Authors (';' separated)")
    parser.add_argument("--owners", default=None, help="Owners (';' separated)")
    parser.add_argument("--description", default=None, help="Package description")
    parser.add_argument("--release-notes", default=None, help="Release notes")
    parser.add_argument("--summary", default=None, help="Package summary")
    parser.add_argument("--language", default=None, help="Package language (e.g. en-US)")
    parser.add_argument("--project-url", default=None, help="Project URL")
    parser.add_argument("--icon-url", default=None, help="Icon URL")
    parser.add_argument("--license-url", default=None, help="License URL")
    parser.add_argument("--copyright", default=None, help="Copyright")
    parser.add_argument("--tags", default=None, help="Space separated tags")
    parser.add_argument("--min-client-version", default=None, help="Minimum NuGet client version")
    parser.add_argument(
        "--require-license-acceptance",
        action="store_true",
        help="Require license acceptance",
    )
    parser.add_argument(
        "--development-dependency",
        action="store_true",
        help="Mark the package as a development dependency",
    )

    args = parser.parse_args(argv)

    try:
        inputs = load_generation_config(args.config) if args.config else ManifestInputs()
    except Exception:
        logger.exception(f"Failed to load generation config: {args.config}")
        return 1

    inputs = apply_overrides(
        inputs,
        {
            "id": args.id,
            "version": args.version,
            "title": args.title,
            "authors": args.authors,
            "owners": args.owners,
            "description": args.description,
            "release_notes": args.release_notes,
            "summary": args.summary,
            "language": args.language,
            "project_url": args.project_url,
            "icon_url": args.icon_url,
            "license_url": args.license_url,
            "copyright": args.copyright,
            "tags": args.tags,
            "min_client_version": args.min_client_version,
            "require_license_acceptance": args.require_license_acceptance,
            "development_dependency": args.development_dependency,
        },
    )

    ok = generate_nuspec(inputs, output_path=args.output, input_path=args.input)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
