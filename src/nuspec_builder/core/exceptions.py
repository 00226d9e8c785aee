"""nuspec builder exceptions.

カスタム例外クラスを定義します。
生成処理中の例外はトップレベル（builder.generate_nuspec）で一度だけ捕捉され、
ログ出力のうえ失敗（False）に変換されます。
"""


class ManifestError(Exception):
    """マニフェスト生成に関する例外の基底クラス."""


class VersionParseError(ManifestError, ValueError):
    """バージョン文字列／バージョン範囲文字列が不正な場合の例外.

    Attributes:
        value: 解析に失敗した入力文字列
    """

    def __init__(self, value: str, reason: str = "") -> None:
        self.value = value
        message = f"Invalid version string: '{value}'"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class FrameworkParseError(ManifestError, ValueError):
    """ターゲットフレームワーク名が不正な場合の例外."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid target framework: '{value}'")


class TemplateError(ManifestError):
    """テンプレート .nuspec が読み込めない／構造が不正な場合の例外.

    Attributes:
        path: テンプレートファイルのパス（文字列から読んだ場合は None）
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path:
            message = f"{message}: {path}"
        super().__init__(message)


class ConfigError(ManifestError):
    """生成設定（YAML）の形式が不正な場合の例外."""
