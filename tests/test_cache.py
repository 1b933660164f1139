#!/usr/bin/env python3
"""
cache.py のユニットテスト
"""
# ruff: noqa: S101

import json

import pytest

from massdedupe.cache import MetadataCache
from massdedupe.webdav import RemoteStat


@pytest.fixture
def cache_path(tmp_path):
    """一時ディレクトリ内のキャッシュファイルパス"""
    return tmp_path / "report.json.cache"


def _stat(path: str) -> RemoteStat:
    return RemoteStat(filename="/" + path, basename=path, size=123, type="file", etag="abc")


class TestMetadataCache:
    """MetadataCache のテスト"""

    def test_load_missing_file(self, cache_path):
        """ファイルが無ければ空"""
        cache = MetadataCache(cache_path)
        assert cache.load() == 0
        assert len(cache) == 0

    def test_save_and_load(self, cache_path):
        """保存した内容を読み込める"""
        cache = MetadataCache(cache_path)
        cache.set("a.jpg", _stat("a.jpg"))
        cache.set("gone.jpg", False)
        assert cache.save() is True

        reloaded = MetadataCache(cache_path)
        assert reloaded.load() == 2
        assert reloaded.get("a.jpg") == _stat("a.jpg")
        assert reloaded.get("gone.jpg") is False
        assert reloaded.get("other.jpg") is None

    def test_file_format(self, cache_path):
        """パス -> stat 辞書 または false の JSON"""
        cache = MetadataCache(cache_path)
        cache.set("a.jpg", _stat("a.jpg"))
        cache.set("gone.jpg", False)
        cache.save()

        data = json.loads(cache_path.read_text(encoding="utf-8"))
        assert data["gone.jpg"] is False
        assert data["a.jpg"]["size"] == 123
        assert data["a.jpg"]["filename"] == "/a.jpg"

    def test_corrupt_file_is_empty(self, cache_path, caplog):
        """壊れた JSON は空として扱う"""
        cache_path.write_text("{not json", encoding="utf-8")
        cache = MetadataCache(cache_path)
        assert cache.load() == 0
        assert "キャッシュ" in caplog.text

    def test_non_object_is_empty(self, cache_path):
        """トップレベルがオブジェクトでなければ空"""
        cache_path.write_text("[1, 2]", encoding="utf-8")
        assert MetadataCache(cache_path).load() == 0

    def test_invalid_entry_is_empty(self, cache_path):
        """不正な値が含まれていれば全体を破棄"""
        cache_path.write_text('{"a.jpg": false, "b.jpg": 42}', encoding="utf-8")
        assert MetadataCache(cache_path).load() == 0

    def test_disabled_cache(self, cache_path):
        """無効時は読み書きしない"""
        cache_path.write_text('{"a.jpg": false}', encoding="utf-8")
        cache = MetadataCache(cache_path, enabled=False)
        assert cache.load() == 0

        cache.set("b.jpg", False)
        assert cache.save() is False
        assert json.loads(cache_path.read_text(encoding="utf-8")) == {"a.jpg": False}
        assert cache.remove() is False
        assert cache_path.exists()

    def test_save_failure_is_not_fatal(self, tmp_path, caplog):
        """保存できなくても例外にしない"""
        cache = MetadataCache(tmp_path / "missing-dir" / "report.json.cache")
        cache.set("a.jpg", False)
        assert cache.save() is False
        assert "保存できません" in caplog.text

    def test_failed_save_keeps_previous_snapshot(self, cache_path, caplog):
        """書き出しに失敗しても前回のキャッシュは読める状態のまま"""
        cache = MetadataCache(cache_path)
        cache.set("a.jpg", _stat("a.jpg"))
        cache.set("gone.jpg", False)
        assert cache.save() is True

        cache.set("bad\ud800.jpg", False)
        assert cache.save() is False
        assert "保存できません" in caplog.text
        assert not (cache_path.parent / "report.json.cache.tmp").exists()

        reloaded = MetadataCache(cache_path)
        assert reloaded.load() == 2
        assert reloaded.get("a.jpg") == _stat("a.jpg")
        assert reloaded.get("gone.jpg") is False

    def test_save_replaces_whole_file(self, cache_path):
        """保存の度にファイル全体を置き換え、一時ファイルを残さない"""
        cache_path.write_text(json.dumps({"old.jpg": False}), encoding="utf-8")
        cache = MetadataCache(cache_path)
        cache.set("a.jpg", False)
        assert cache.save() is True

        assert json.loads(cache_path.read_text(encoding="utf-8")) == {"a.jpg": False}
        assert list(cache_path.parent.iterdir()) == [cache_path]

    def test_remove(self, cache_path):
        """キャッシュファイルを削除"""
        cache = MetadataCache(cache_path)
        cache.save()
        assert cache.remove() is True
        assert not cache_path.exists()
        assert cache.remove() is False
