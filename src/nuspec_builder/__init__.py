"""nuspec_builder: NuGet パッケージマニフェスト（.nuspec）ジェネレーター.

テンプレート .nuspec とビルドからの入力をマージし、内容が変わった場合のみ書き出す。
"""

from nuspec_builder.builder import create_manifest, generate_nuspec, write_nuspec_file
from nuspec_builder.config import load_generation_config
from nuspec_builder.core.models import Manifest, ManifestInputs, ManifestMetadata
from nuspec_builder.nuspec import parse_manifest, read_manifest, serialize_manifest

__version__ = "0.1.0"

__all__ = [
    # builder
    "generate_nuspec",
    "create_manifest",
    "write_nuspec_file",
    # config
    "load_generation_config",
    # models
    "Manifest",
    "ManifestInputs",
    "ManifestMetadata",
    # nuspec
    "parse_manifest",
    "read_manifest",
    "serialize_manifest",
]
