"""重複グループから残す 1 ファイルを決めるロジック

ファイルはサイズの大きい順、同サイズならパスの短い順に並べ、先頭側を残す。
除外パターン（exclude）に一致するファイルは残す側に、
優先削除パターン（include）に一致するファイルは削除する側に寄せる。
"""

import enum
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .report import DuplicateGroup, FileRecord


class SelectionInvariantError(AssertionError):
    """削除数が「ファイル数 - 1」にならなかった（ロジックの不具合）"""


class DeleteReason(enum.Enum):
    EXCLUDED_DUPLICATE = "excluded-dupe"
    INCLUDED = "include"
    SMALLER = "smaller"
    EXCLUDED_LAST_RESORT = "excluded-last"


@dataclass(frozen=True)
class Verdict:
    reason: DeleteReason | None = None

    @property
    def keep(self) -> bool:
        return self.reason is None

    @property
    def delete(self) -> bool:
        return self.reason is not None


def _normalize_patterns(patterns: Iterable[str]) -> tuple[str, ...]:
    # 前後の空白を除いて大文字化、順序を保って重複除去
    return tuple(dict.fromkeys(p.strip().upper() for p in patterns if p.strip()))


@dataclass(frozen=True)
class RuleSet:
    """大文字小文字を区別しない部分一致パターン"""

    exclude: tuple[str, ...] = ()
    include: tuple[str, ...] = ()

    @classmethod
    def build(cls, exclude: Iterable[str] = (), include: Iterable[str] = ()) -> "RuleSet":
        return cls(exclude=_normalize_patterns(exclude), include=_normalize_patterns(include))

    def is_excluded(self, path: str) -> bool:
        upper = path.upper()
        return any(p in upper for p in self.exclude)

    def is_included(self, path: str) -> bool:
        upper = path.upper()
        return any(p in upper for p in self.include)


@dataclass(frozen=True)
class Selection:
    """1 グループ分の判定結果"""

    group: DuplicateGroup
    files: tuple[FileRecord, ...]  # 生存しているファイル（ソート済み）
    verdicts: dict[int, Verdict]  # file_id -> Verdict
    fallback: str | None = None  # "all-deleted" / "none-deleted"

    def deleted_files(self) -> list[FileRecord]:
        return [f for f in self.files if self.verdicts[f.file_id].delete]

    def kept_file(self) -> FileRecord | None:
        for f in self.files:
            if self.verdicts[f.file_id].keep:
                return f
        return None


def sort_files(files: Iterable[FileRecord]) -> list[FileRecord]:
    """サイズ降順、パス長昇順（同条件はパス、ID の順）"""
    return sorted(files, key=lambda f: (-f.size, len(f.path), f.path, f.file_id))


def _mark(files: Sequence[FileRecord], rules: RuleSet) -> tuple[dict[int, DeleteReason], int]:
    to_delete: dict[int, DeleteReason] = {}
    first_non_included = 0
    kept_one = False

    for i, file in enumerate(files):
        if rules.is_excluded(file.path):
            if kept_one:
                to_delete[file.file_id] = DeleteReason.EXCLUDED_DUPLICATE
            else:
                kept_one = True
            continue

        if rules.is_included(file.path):
            # 先頭が削除対象なら、同サイズの次のファイルを残す側にずらす
            if i == first_non_included and i + 1 < len(files) and files[i + 1].size == file.size:
                first_non_included += 1
            to_delete[file.file_id] = DeleteReason.INCLUDED
            continue

        if i > first_non_included:
            to_delete[file.file_id] = DeleteReason.SMALLER
        else:
            kept_one = True

    return to_delete, first_non_included


def select(
    group: DuplicateGroup,
    is_live: Callable[[str], bool],
    rules: RuleSet,
) -> Selection:
    """グループ内で残すファイルを 1 つ決め、残りに削除理由を付ける

    生存ファイルが 2 未満なら verdicts は空。

    Raises:
        SelectionInvariantError: 削除数が生存ファイル数 - 1 でない場合
    """
    files = tuple(sort_files(f for f in group.files if is_live(f.path)))
    if len(files) < 2:
        return Selection(group=group, files=files, verdicts={})

    to_delete, first_non_included = _mark(files, rules)
    fallback = None

    if len(to_delete) == len(files):
        # 全部削除対象になった: include に一致しない最初のもの、
        # なければ同サイズでずらした位置、それもなければ先頭を残す
        fallback = "all-deleted"
        survivor = next((f for f in files if not rules.is_included(f.path)), None)
        if survivor is None:
            survivor = files[first_non_included] if first_non_included < len(files) else files[0]
        del to_delete[survivor.file_id]

    if not to_delete:
        # 全部 exclude に一致した等: 先頭だけ残す
        fallback = "none-deleted"
        for file in files[1:]:
            to_delete[file.file_id] = DeleteReason.EXCLUDED_LAST_RESORT

    if len(to_delete) != len(files) - 1:
        raise SelectionInvariantError(
            f"group {group.group_id}: {len(to_delete)} deletions for {len(files)} files"
        )

    verdicts = {f.file_id: Verdict(to_delete.get(f.file_id)) for f in files}
    return Selection(group=group, files=files, verdicts=verdicts, fallback=fallback)
