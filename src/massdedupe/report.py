"""MediaDC が出力した重複グループ JSON の読み込み"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .constants import FILES_PREFIX, TRASH_PREFIX


class InvalidReportError(ValueError):
    """入力 JSON の形式が不正"""


@dataclass(frozen=True)
class FileRecord:
    """重複グループ内の 1 ファイル"""

    file_id: int
    path: str  # 論理パス（"files/..." や "files_trashbin/..."）
    size: int
    name: str = ""


@dataclass(frozen=True)
class DuplicateGroup:
    group_id: int
    files: tuple[FileRecord, ...]

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.files)


@dataclass(frozen=True)
class TaskInfo:
    name: str
    files_total: int
    files_total_size: int


@dataclass(frozen=True)
class Report:
    task: TaskInfo
    groups: tuple[DuplicateGroup, ...]

    @property
    def file_count(self) -> int:
        return sum(len(g.files) for g in self.groups)

    @property
    def file_size(self) -> int:
        return sum(g.total_size for g in self.groups)

    def unique_paths(self) -> list[str]:
        """全グループに現れるパスを出現順に重複なしで返す"""
        return list(dict.fromkeys(f.path for g in self.groups for f in g.files))


def cleanup_path(path: str) -> str:
    """先頭の "files/" を取り除いて WebDAV 上のパスにする"""
    if path.startswith(FILES_PREFIX):
        return path[len(FILES_PREFIX) :]
    return path


def is_trash_path(path: str) -> bool:
    """ゴミ箱内のパスかどうか"""
    return path.startswith(TRASH_PREFIX)


def _require_int(value: Any, what: str) -> int:
    # bool は int のサブクラスなので明示的に除外
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidReportError(f"{what} が整数ではありません: {value!r}")
    return value


def _parse_file(data: Any, group_id: int) -> FileRecord:
    if not isinstance(data, dict):
        raise InvalidReportError(f"グループ {group_id} のファイル要素がオブジェクトではありません")
    path = data.get("filepath")
    if not isinstance(path, str) or not path:
        raise InvalidReportError(f"グループ {group_id} に filepath のないファイルがあります")
    size = _require_int(data.get("filesize"), f"{path} の filesize")
    if size < 0:
        raise InvalidReportError(f"{path} の filesize が負です")
    return FileRecord(
        file_id=_require_int(data.get("fileid"), f"{path} の fileid"),
        path=path,
        size=size,
        name=str(data.get("filename", "")),
    )


def _parse_group(data: Any) -> DuplicateGroup:
    if not isinstance(data, dict):
        raise InvalidReportError("Results の要素がオブジェクトではありません")
    group_id = _require_int(data.get("group_id"), "group_id")
    files = data.get("files")
    if not isinstance(files, list):
        raise InvalidReportError(f"グループ {group_id} の files が配列ではありません")
    return DuplicateGroup(group_id=group_id, files=tuple(_parse_file(f, group_id) for f in files))


def parse_report(data: Any) -> Report:
    """デコード済み JSON から Report を組み立てる

    Raises:
        InvalidReportError: Task / Results が欠けている、または型が違う場合
    """
    if not isinstance(data, dict):
        raise InvalidReportError("JSON のトップレベルがオブジェクトではありません")

    task = data.get("Task")
    results = data.get("Results")
    if not isinstance(task, dict):
        raise InvalidReportError("Task がありません")
    if not isinstance(results, list):
        raise InvalidReportError("Results が配列ではありません")

    try:
        files_total = int(task.get("files_total") or 0)
        files_total_size = int(task.get("files_total_size") or 0)
    except (TypeError, ValueError) as e:
        raise InvalidReportError(f"Task の集計値が不正です: {e}") from e

    return Report(
        task=TaskInfo(
            name=str(task.get("name", "")),
            files_total=files_total,
            files_total_size=files_total_size,
        ),
        groups=tuple(_parse_group(g) for g in results),
    )


def load_report(path: str | Path) -> Report:
    """JSON ファイルを読み込む"""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidReportError(f"JSON として読み込めません: {e}") from e
    return parse_report(data)
