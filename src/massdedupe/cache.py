"""ファイル情報キャッシュ（JSON）"""

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from .webdav import RemoteStat

logger = logging.getLogger(__name__)

# パス -> RemoteStat、存在しない場合は False
CacheEntry = RemoteStat | bool


class MetadataCache:
    """WebDAV の stat 結果を入力 JSON の隣に保存するキャッシュ

    enabled が False の場合はメモリ上だけで動作し、ファイルには触れない。
    """

    def __init__(self, path: str | Path, enabled: bool = True) -> None:
        self.path = Path(path)
        self.enabled = enabled
        self._entries: dict[str, CacheEntry] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry

    def load(self) -> int:
        """保存済みキャッシュを読み込む（壊れていれば空として扱う）"""
        self._entries = {}
        if not self.enabled or not self.path.exists():
            return 0

        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("トップレベルがオブジェクトではありません")
            self._entries = {key: _decode_entry(value) for key, value in data.items()}
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("キャッシュ %s を読み込めないため破棄します: %s", self.path, e)
            self._entries = {}

        return len(self._entries)

    def save(self) -> bool:
        """キャッシュ全体を書き出す（失敗しても処理は継続）"""
        if not self.enabled:
            return False

        data = {key: _encode_entry(entry) for key, entry in self._entries.items()}
        # 前回のスナップショットは置き換えが完了するまで残る
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except (OSError, ValueError) as e:
            logger.warning("キャッシュ %s を保存できません: %s", self.path, e)
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            return False
        return True

    def remove(self) -> bool:
        """キャッシュファイルを削除"""
        if not self.enabled or not self.path.exists():
            return False
        try:
            self.path.unlink()
        except OSError as e:
            logger.warning("キャッシュ %s を削除できません: %s", self.path, e)
            return False
        return True


def _encode_entry(entry: CacheEntry) -> Any:
    if isinstance(entry, RemoteStat):
        return entry.to_dict()
    return False


def _decode_entry(value: Any) -> CacheEntry:
    if isinstance(value, dict):
        return RemoteStat.from_dict(value)
    if value is False:
        return False
    raise ValueError(f"不正なキャッシュ値です: {value!r}")
