"""テキスト表示ユーティリティ（全角文字対応）"""

import re
import shutil
import unicodedata

_ANSI_ESCAPE = re.compile(r"\033\[[0-9;]*m")

_UNITS = (
    (1024**4, "TiB"),
    (1024**3, "GiB"),
    (1024**2, "MiB"),
)


def humanize_bytes(size: int) -> str:
    """バイト数を読みやすい単位に変換（小数点以下 2 桁）"""
    for unit_size, unit in _UNITS:
        if size >= unit_size:
            return f"{size / unit_size:.2f} {unit}"
    if size > 1024:
        return f"{size / 1024:.2f} KiB"
    return f"{size} B"


def get_term_width() -> int:
    """ターミナルの幅を取得"""
    return shutil.get_terminal_size().columns


def get_visible_width(text: str) -> int:
    """ANSIエスケープシーケンスを除いた表示上の幅を返す（全角文字は2）"""
    clean_text = _ANSI_ESCAPE.sub("", text)

    width = 0
    for char in clean_text:
        if unicodedata.east_asian_width(char) in ("F", "W", "A"):  # Full-width, Wide, Ambiguous
            width += 2
        else:
            width += 1
    return width


def truncate_to_width(text: str, max_width: int) -> str:
    """文字列を指定した表示幅に収まるように先頭を省略（パスの末尾を残す）"""
    if get_visible_width(text) <= max_width:
        return text

    result = text
    while result and get_visible_width(result) > max_width - 3:  # "..." の分
        result = result[1:]
    return "..." + result
