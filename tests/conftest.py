"""テスト共通のフィクスチャ"""

import pytest

from massdedupe.webdav import RemoteNotFoundError, RemoteStat


class FakeRemote:
    """stat / delete の呼び出しを記録する WebDAV クライアントの代わり

    stats に無いパスは 404 扱い。値に例外を入れるとそれを送出する。
    """

    def __init__(self, stats=None, delete_errors=None):
        self.stats = stats or {}
        self.delete_errors = delete_errors or {}
        self.stat_calls: list[str] = []
        self.delete_calls: list[str] = []

    def stat(self, path: str) -> RemoteStat:
        self.stat_calls.append(path)
        value = self.stats.get(path)
        if value is None:
            raise RemoteNotFoundError(f"{path} が見つかりません")
        if isinstance(value, BaseException):
            raise value
        return value

    def delete(self, path: str) -> None:
        self.delete_calls.append(path)
        error = self.delete_errors.get(path)
        if error is not None:
            raise error


def make_stat(path: str, size: int = 100) -> RemoteStat:
    return RemoteStat(filename="/" + path, basename=path.rsplit("/", 1)[-1], size=size, type="file")


@pytest.fixture
def fake_remote():
    """パスを渡すと生存扱いの FakeRemote を作るファクトリ"""

    def factory(live_paths=(), errors=None, delete_errors=None):
        stats = {p: make_stat(p) for p in live_paths}
        stats.update(errors or {})
        return FakeRemote(stats, delete_errors)

    return factory
