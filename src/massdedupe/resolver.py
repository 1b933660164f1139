"""WebDAV 上のファイル状態の解決（キャッシュ付き）"""

import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

from .cache import MetadataCache
from .constants import CACHE_FLUSH_INTERVAL
from .report import cleanup_path, is_trash_path
from .webdav import RemoteNotFoundError, RemoteStat

logger = logging.getLogger(__name__)


class StatClient(Protocol):
    def stat(self, path: str) -> RemoteStat: ...


class StatusState(enum.Enum):
    LIVE = "live"
    ABSENT = "absent"  # 削除済み・ゴミ箱内
    UNKNOWN = "unknown"  # 一時的な通信エラー（キャッシュしない）


@dataclass(frozen=True)
class RemoteStatus:
    state: StatusState
    stat: RemoteStat | None = None

    @property
    def is_live(self) -> bool:
        return self.state is StatusState.LIVE


ABSENT = RemoteStatus(StatusState.ABSENT)
UNKNOWN = RemoteStatus(StatusState.UNKNOWN)


def _from_cache(entry: RemoteStat | bool) -> RemoteStatus:
    if isinstance(entry, RemoteStat):
        return RemoteStatus(StatusState.LIVE, entry)
    return ABSENT


class MetadataResolver:
    """論理パスごとの RemoteStatus を求める

    キャッシュ済みのパスは問い合わせず、ゴミ箱内のパスは問い合わせずに ABSENT とする。
    問い合わせ flush_interval 件ごとと最後にキャッシュを保存する。
    """

    def __init__(
        self,
        client: StatClient,
        cache: MetadataCache,
        flush_interval: int = CACHE_FLUSH_INTERVAL,
    ) -> None:
        self.client = client
        self.cache = cache
        self.flush_interval = flush_interval
        self.remote_calls = 0

    def _lookup(self, path: str) -> RemoteStatus:
        key = cleanup_path(path)

        if is_trash_path(path):
            self.cache.set(key, False)
            return ABSENT

        self.remote_calls += 1
        try:
            stat = self.client.stat(key)
        except RemoteNotFoundError as e:
            logger.warning('"%s" の情報を取得できません - %s', path, e)
            self.cache.set(key, False)
            return ABSENT
        except Exception as e:
            # RemoteError 以外もここで止め、次回再取得する
            logger.warning('"%s" の情報を取得できません - %s（次回再取得します）', path, e)
            return UNKNOWN

        self.cache.set(key, stat)
        return RemoteStatus(StatusState.LIVE, stat)

    def resolve(
        self,
        paths: Iterable[str],
        progress_callback: Callable[[int], None] | None = None,
    ) -> dict[str, RemoteStatus]:
        """パスごとの状態を返す"""
        result: dict[str, RemoteStatus] = {}
        lookups = 0

        try:
            for path in paths:
                if path in result:
                    continue

                entry = self.cache.get(cleanup_path(path))
                if entry is not None:
                    result[path] = _from_cache(entry)
                else:
                    result[path] = self._lookup(path)
                    lookups += 1
                    if lookups % self.flush_interval == 0:
                        self.cache.save()

                if progress_callback is not None:
                    progress_callback(1)
        finally:
            self.cache.save()

        logger.debug("%d 件の状態を取得（問い合わせ %d 件、通信 %d 件）", len(result), lookups, self.remote_calls)
        return result
