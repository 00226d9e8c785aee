"""ターゲットフレームワーク名の解析.

依存関係・参照のグループ分けに使うフレームワークラベルを扱います。
短い名前（net45, netstandard1.3）と完全名（.NETFramework,Version=v4.5）の両方を受け付け、
同じフレームワークは表記が違っても等価として扱います。

ソートキー／出力値は正規化した短いフォルダ名（get_short_folder_name）です。
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .exceptions import FrameworkParseError

# 短い名前 → 完全な識別子
_SHORT_TO_IDENTIFIER = {
    "net": ".NETFramework",
    "netstandard": ".NETStandard",
    "netcoreapp": ".NETCoreApp",
    "netcore": ".NETCore",
    "netmf": ".NETMicroFramework",
    "dotnet": ".NETPlatform",
    "portable": ".NETPortable",
    "uap": "UAP",
    "win": "Windows",
    "wp": "WindowsPhone",
    "wpa": "WindowsPhoneApp",
    "sl": "Silverlight",
    "dnx": "DNX",
    "dnxcore": "DNXCore",
    "aspnet": "ASP.NET",
    "aspnetcore": "ASP.NETCore",
    "monoandroid": "MonoAndroid",
    "monotouch": "MonoTouch",
    "monomac": "MonoMac",
    "xamarinios": "Xamarin.iOS",
    "xamarinmac": "Xamarin.Mac",
    "xamarintvos": "Xamarin.TVOS",
    "xamarinwatchos": "Xamarin.WatchOS",
    "tizen": "Tizen",
    "native": "native",
    "any": "Any",
    "agnostic": "Agnostic",
}
_IDENTIFIER_TO_SHORT = {v.lower(): k for k, v in _SHORT_TO_IDENTIFIER.items()}

# バージョンを "1.3" のようにドット区切りで書くフレームワーク
_DOTTED_VERSION_IDENTIFIERS = {".NETStandard", ".NETCoreApp", ".NETPlatform", "UAP", "Tizen"}

# よく使われる PCL プロファイル番号 → 構成フレームワーク（短い名前の表記順）
_PORTABLE_PROFILES = {
    7: "net45+win8",
    44: "net451+win81",
    49: "net45+wp8",
    78: "net45+win8+wp8",
    111: "net45+win8+wpa81",
    151: "net451+win81+wpa81",
    259: "net45+win8+wpa81+wp8",
    328: "net40+sl5+win8+wpa81+wp8",
    344: "net45+sl5+win8+wpa81+wp8",
}
_PROFILE_NUMBERS = {profile: number for number, profile in _PORTABLE_PROFILES.items()}
_PROFILE_BY_COMPONENTS = {frozenset(p.split("+")): p for p in _PORTABLE_PROFILES.values()}
_PROFILE_NUMBER_PATTERN = re.compile(r"^profile(?P<number>\d+)$", re.IGNORECASE)

_NAME_PATTERN = re.compile(r"^(?P<name>[A-Za-z.][A-Za-z.]*?)(?P<version>\d+(?:\.\d+)*)?$")
_VERSION_PART = re.compile(r"^v?(?P<version>\d+(?:\.\d+)*)$", re.IGNORECASE)


@dataclass(frozen=True)
class TargetFramework:
    """ターゲットフレームワーク.

    Attributes:
        identifier: 完全な識別子（例: ".NETFramework"）
        version: 4桁に正規化したバージョン（例: (4, 5, 0, 0)）
        profile: プロファイル（PCL の "net45+win8" など）。無ければ空文字
        opaque: 未知のラベル。identifier にラベル（小文字化）をそのまま持ち、比較・ソートのキーにする
    """

    identifier: str
    version: tuple[int, int, int, int] = (0, 0, 0, 0)
    profile: str = ""
    opaque: bool = False

    def get_short_folder_name(self) -> str:
        """正規化した短いフォルダ名を返す（例: "net45", "netstandard1.3"）."""
        if self.opaque:
            return self.identifier
        short = _IDENTIFIER_TO_SHORT.get(self.identifier.lower(), self.identifier.lower())
        if short == "netcoreapp" and self.version[0] >= 5:
            short = "net"
        text = short + _format_short_version(self.identifier, self.version)
        if self.profile:
            text += f"-{self.profile}"
        return text

    def get_framework_string(self) -> str:
        """完全名を返す（例: ".NETFramework,Version=v4.5"）."""
        if self.opaque:
            return self.identifier
        parts = list(self.version)
        while len(parts) > 2 and parts[-1] == 0:
            parts.pop()
        text = f"{self.identifier},Version=v{'.'.join(str(p) for p in parts)}"
        if self.profile:
            number = _PROFILE_NUMBERS.get(self.profile)
            profile = f"Profile{number}" if number is not None else self.profile
            text += f",Profile={profile}"
        return text

    def __str__(self) -> str:
        return self.get_short_folder_name()


def _format_short_version(identifier: str, version: tuple[int, ...]) -> str:
    parts = list(version)
    while parts and parts[-1] == 0:
        parts.pop()
    if not parts:
        return ""
    if identifier in _DOTTED_VERSION_IDENTIFIERS or any(p > 9 for p in parts):
        while len(parts) < 2:
            parts.append(0)
        return ".".join(str(p) for p in parts)
    # net4 → net40（1桁は2桁に揃える）
    while len(parts) < 2:
        parts.append(0)
    return "".join(str(p) for p in parts)


def _pad_version(parts: list[int], label: str) -> tuple[int, int, int, int]:
    if len(parts) > 4:
        raise FrameworkParseError(label)
    parts = parts + [0] * (4 - len(parts))
    return (parts[0], parts[1], parts[2], parts[3])


def _parse_short_version(digits: str, label: str) -> tuple[int, int, int, int]:
    if "." in digits:
        return _pad_version([int(p) for p in digits.split(".")], label)
    # "45" → 4.5, "451" → 4.5.1
    return _pad_version([int(ch) for ch in digits], label)


def _canonical_portable_profile(profile: str) -> str:
    """PCL プロファイルを短い名前の構成表記に揃える（"Profile7" と "win8+net45" → "net45+win8"）."""
    match = _PROFILE_NUMBER_PATTERN.match(profile)
    if match:
        return _PORTABLE_PROFILES.get(int(match.group("number")), profile)
    components = frozenset(profile.lower().split("+"))
    return _PROFILE_BY_COMPONENTS.get(components, profile.lower())


def _opaque(label: str) -> TargetFramework:
    return TargetFramework(identifier=label.lower(), opaque=True)


def _parse_full_name(label: str) -> TargetFramework:
    identifier, *properties = [p.strip() for p in label.split(",")]
    if not identifier:
        raise FrameworkParseError(label)

    version = (0, 0, 0, 0)
    profile = ""
    for prop in properties:
        key, sep, value = prop.partition("=")
        if not sep:
            raise FrameworkParseError(label)
        key = key.strip().lower()
        value = value.strip()
        if key == "version":
            match = _VERSION_PART.match(value)
            if not match:
                raise FrameworkParseError(label)
            version = _pad_version([int(p) for p in match.group("version").split(".")], label)
        elif key == "profile":
            profile = value
        else:
            raise FrameworkParseError(label)

    # 既知の識別子は大文字小文字を正規化する
    short = _IDENTIFIER_TO_SHORT.get(identifier.lower())
    if short is not None:
        identifier = _SHORT_TO_IDENTIFIER[short]
    if identifier == ".NETPortable" and profile:
        profile = _canonical_portable_profile(profile)
    return TargetFramework(identifier=identifier, version=version, profile=profile)


def parse_framework(label: str | None) -> TargetFramework | None:
    """フレームワークラベルを TargetFramework に変換する.

    未知の短い名前（"netnano1.0" など）はエラーにせず、ラベル自体をキーとする
    opaque な TargetFramework として扱う（大文字小文字は区別しない）。

    Args:
        label: 短い名前（"net45"）または完全名（".NETFramework,Version=v4.5"）

    Returns:
        TargetFramework。None / 空文字の場合は None（フレームワーク指定なし）

    Raises:
        FrameworkParseError: 完全名の形式が不正、またはバージョンが5桁以上の場合

    Examples:
        >>> parse_framework("net45") == parse_framework(".NETFramework,Version=v4.5")
        True
        >>> parse_framework("netstandard1.3").get_short_folder_name()
        'netstandard1.3'
        >>> parse_framework("netnano1.0").get_short_folder_name()
        'netnano1.0'
    """
    if label is None:
        return None
    text = label.strip()
    if not text:
        return None

    if "," in text:
        return _parse_full_name(text)

    name, _, profile = text.partition("-")
    match = _NAME_PATTERN.match(name)
    if not match:
        return _opaque(text)

    # "net45" のほか、".NETFramework4.5" のような識別子+バージョン表記も受け付ける
    short = match.group("name").lower()
    short = short if short in _SHORT_TO_IDENTIFIER else _IDENTIFIER_TO_SHORT.get(short)
    if short is None:
        return _opaque(text)
    identifier = _SHORT_TO_IDENTIFIER[short]

    digits = match.group("version")
    version = _parse_short_version(digits, label) if digits else (0, 0, 0, 0)
    # net5.0 以降は .NETCoreApp
    if identifier == ".NETFramework" and version[0] >= 5:
        identifier = ".NETCoreApp"
    if identifier == ".NETPortable" and profile:
        profile = _canonical_portable_profile(profile)
    return TargetFramework(identifier=identifier, version=version, profile=profile)
