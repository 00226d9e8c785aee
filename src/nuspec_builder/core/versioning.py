"""NuGet バージョンとバージョン範囲.

パッケージ依存関係の version 属性で使われる値型と、その解析・整形を提供します。

設計方針:
    - バージョンは SemVer 2.0 + 4桁目（revision）を許容する NuGet 形式
    - 比較ではビルドメタデータ（+以降）を無視し、プレリリースラベルは大文字小文字を区別しない
    - 範囲は区間表記（[1.0, 2.0) など）で、上下限それぞれ独立に包含／除外を持つ
    - 空文字の範囲は「制約なし」として None を返す（エラーにしない）
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

from .exceptions import VersionParseError

_VERSION_PATTERN = re.compile(
    r"^(?P<numbers>\d+(?:\.\d+){0,3})"
    r"(?:-(?P<release>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<metadata>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@total_ordering
@dataclass(frozen=True, eq=False)
class NuGetVersion:
    """NuGet のパッケージバージョン.

    Attributes:
        major, minor, patch, revision: 数値部（省略された桁は 0）
        release_labels: プレリリースラベル（"-beta.1" → ("beta", "1")）
        metadata: ビルドメタデータ（比較には使わない）
    """

    major: int
    minor: int = 0
    patch: int = 0
    revision: int = 0
    release_labels: tuple[str, ...] = ()
    metadata: str | None = field(default=None, repr=False)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.release_labels)

    @property
    def release(self) -> str:
        return ".".join(self.release_labels)

    def _sort_key(self) -> tuple:
        numbers = (self.major, self.minor, self.patch, self.revision)
        if not self.release_labels:
            # ラベル無しはラベル付きより後ろ
            return (numbers, 1, ())
        labels = tuple(
            (0, int(label), "") if label.isdigit() else (1, 0, label.lower())
            for label in self.release_labels
        )
        return (numbers, 0, labels)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash(self._sort_key())

    def to_normalized_string(self) -> str:
        """正規化表記を返す（例: "1.0.0", "1.0.0.5", "2.0.0-beta.1"）."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.release_labels:
            text += f"-{self.release}"
        return text

    def __str__(self) -> str:
        return self.to_normalized_string()


def parse_version(text: str) -> NuGetVersion:
    """バージョン文字列を NuGetVersion に変換する.

    Args:
        text: バージョン文字列（例: "1.0", "1.2.3-beta.1+sha.abc"）

    Returns:
        解析済みのバージョン

    Raises:
        VersionParseError: 形式が不正な場合

    Examples:
        >>> str(parse_version("1.0"))
        '1.0.0'
        >>> parse_version("1.0.0-beta") < parse_version("1.0.0")
        True
    """
    if text is None:
        raise VersionParseError("None", "version is required")
    match = _VERSION_PATTERN.match(text.strip())
    if not match:
        raise VersionParseError(text)

    numbers = [int(part) for part in match.group("numbers").split(".")]
    numbers.extend([0] * (4 - len(numbers)))
    release = match.group("release")
    release_labels = tuple(release.split(".")) if release else ()
    for label in release_labels:
        # SemVer: 数値ラベルの先頭0は不可
        if label.isdigit() and len(label) > 1 and label.startswith("0"):
            raise VersionParseError(text, f"numeric label '{label}' has a leading zero")

    return NuGetVersion(
        major=numbers[0],
        minor=numbers[1],
        patch=numbers[2],
        revision=numbers[3],
        release_labels=release_labels,
        metadata=match.group("metadata"),
    )


@dataclass(frozen=True)
class VersionRange:
    """バージョン範囲.

    上下限はそれぞれ省略可能で、包含（[ ]）／除外（( )）を独立に持つ。
    上下限が両方とも無い範囲は「任意のバージョン」を表す。
    min <= max の整合性は呼び出し側の責任とする（parse_version_range は検証する）。
    """

    min_version: NuGetVersion | None = None
    is_min_inclusive: bool = True
    max_version: NuGetVersion | None = None
    is_max_inclusive: bool = False

    @property
    def is_unbounded(self) -> bool:
        return self.min_version is None and self.max_version is None

    def satisfies(self, version: NuGetVersion) -> bool:
        """version がこの範囲に含まれるか判定する."""
        if self.min_version is not None:
            if self.is_min_inclusive:
                if version < self.min_version:
                    return False
            elif version <= self.min_version:
                return False
        if self.max_version is not None:
            if self.is_max_inclusive:
                if version > self.max_version:
                    return False
            elif version >= self.max_version:
                return False
        return True

    def __str__(self) -> str:
        lower = "[" if self.min_version is not None and self.is_min_inclusive else "("
        upper = "]" if self.max_version is not None and self.is_max_inclusive else ")"
        min_text = str(self.min_version) if self.min_version is not None else ""
        max_text = str(self.max_version) if self.max_version is not None else ""
        return f"{lower}{min_text}, {max_text}{upper}"


def parse_version_range(text: str | None) -> VersionRange | None:
    """区間表記の文字列を VersionRange に変換する.

    Args:
        text: 範囲文字列（"1.0", "[1.0]", "[1.0, 2.0)", "(, 2.0]" など）

    Returns:
        解析済みの範囲。None / 空文字の場合は None（制約なし）

    Raises:
        VersionParseError: 形式が不正、フローティング指定、または下限 > 上限の場合
    """
    if text is None:
        return None
    s = text.strip()
    if not s:
        return None
    if "*" in s:
        raise VersionParseError(text, "floating versions are not supported")

    # 区間記号なし → 下限（包含）のみ
    if s[0] not in "[(":
        return VersionRange(min_version=parse_version(s), is_min_inclusive=True)

    if len(s) < 3 or s[-1] not in "])":
        raise VersionParseError(text, "unbalanced interval brackets")

    is_min_inclusive = s[0] == "["
    is_max_inclusive = s[-1] == "]"
    parts = s[1:-1].split(",")

    if len(parts) == 1:
        # [1.0] は完全一致。除外の完全一致は空集合なので不正
        if not (is_min_inclusive and is_max_inclusive):
            raise VersionParseError(text, "exact versions must use inclusive brackets")
        exact = parse_version(parts[0])
        return VersionRange(exact, True, exact, True)

    if len(parts) != 2:
        raise VersionParseError(text, "too many interval parts")

    lower_text, upper_text = parts[0].strip(), parts[1].strip()
    min_version = parse_version(lower_text) if lower_text else None
    max_version = parse_version(upper_text) if upper_text else None

    if min_version is not None and max_version is not None:
        if max_version < min_version:
            raise VersionParseError(text, "maximum is lower than minimum")
        if max_version == min_version and not (is_min_inclusive and is_max_inclusive):
            raise VersionParseError(text, "empty interval")

    return VersionRange(
        min_version=min_version,
        is_min_inclusive=is_min_inclusive if min_version is not None else True,
        max_version=max_version,
        is_max_inclusive=is_max_inclusive if max_version is not None else False,
    )


def format_version_range(version_range: VersionRange | None) -> str:
    """範囲を .nuspec の version 属性の値に整形する.

    None（集約の結果、制約が無くなった場合を含む）は "0.0.0"（任意のバージョン）として扱う。
    """
    if version_range is None or version_range.is_unbounded:
        return "0.0.0"

    min_version = version_range.min_version
    max_version = version_range.max_version

    if max_version is None and version_range.is_min_inclusive:
        return str(min_version)

    if (
        min_version is not None
        and max_version is not None
        and min_version == max_version
        and version_range.is_min_inclusive
        and version_range.is_max_inclusive
    ):
        return f"[{min_version}]"

    return str(version_range)
