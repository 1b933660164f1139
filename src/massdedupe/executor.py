"""削除の実行"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from .report import FileRecord, cleanup_path
from .selector import Selection

logger = logging.getLogger(__name__)


class DeleteClient(Protocol):
    def delete(self, path: str) -> None: ...


@dataclass
class DeletionTotals:
    """全グループ通算の削除結果"""

    deleted_count: int = 0
    deleted_bytes: int = 0
    failed_count: int = 0


class DeletionExecutor:
    """Selection の削除対象を順に削除する

    1 ファイルの失敗は記録して次へ進む。dry_run なら削除せずログだけ出す。
    """

    def __init__(self, client: DeleteClient, dry_run: bool = False) -> None:
        self.client = client
        self.dry_run = dry_run
        self.totals = DeletionTotals()

    def _remove(self, file: FileRecord) -> bool:
        if self.dry_run:
            logger.info('[dry-run] "%s" を削除します', file.path)
            return True

        logger.info('"%s" を削除します...', file.path)
        try:
            self.client.delete(cleanup_path(file.path))
        except Exception as e:
            logger.error('!!! "%s" の削除に失敗しました: %s', file.path, e)
            return False
        return True

    def apply(
        self,
        selection: Selection,
        progress_callback: Callable[[int], None] | None = None,
    ) -> DeletionTotals:
        """このグループ分の結果を返し、通算結果にも加算する"""
        group_totals = DeletionTotals()

        for file in selection.deleted_files():
            if self._remove(file):
                group_totals.deleted_count += 1
                group_totals.deleted_bytes += file.size
            else:
                group_totals.failed_count += 1
            if progress_callback is not None:
                progress_callback(1)

        self.totals.deleted_count += group_totals.deleted_count
        self.totals.deleted_bytes += group_totals.deleted_bytes
        self.totals.failed_count += group_totals.failed_count
        return group_totals
