"""実行・表示処理"""

import os
import sys
from typing import Protocol

import enlighten

from .cache import MetadataCache
from .config import DedupeOptions
from .constants import (
    COLOR_DIM,
    COLOR_ERROR,
    COLOR_REASON,
    COLOR_RESET,
    COLOR_SIZE,
    COLOR_SUCCESS,
    COLOR_TITLE,
    COLOR_WARNING,
)
from .executor import DeleteClient, DeletionExecutor, DeletionTotals
from .report import Report, load_report
from .resolver import MetadataResolver, RemoteStatus, StatClient
from .selector import RuleSet, Selection, select
from .summary import build_dir_tree, format_dir_tree
from .text import get_term_width, humanize_bytes, truncate_to_width
from .webdav import WebDavClient


class RemoteClient(StatClient, DeleteClient, Protocol):
    pass


def _print_parameters(options: DedupeOptions) -> None:
    print(f"{COLOR_TITLE}🧹 Starting with the following parameters{COLOR_RESET}")
    masked = options.masked()
    for name in ("host", "user", "password", "port", "proto", "dav_path", "cache_info", "dry_run"):
        print(f"  {name}: {getattr(masked, name)}")
    print(f"  exclude: {list(options.exclude)}")
    print(f"  include: {list(options.include)}")
    print(f"  file: {options.json_path}")
    print(f"  url: {options.base_url}")


def _print_task(report: Report) -> None:
    print()
    print(f'Starting filtering process for task "{report.task.name}"')
    print(
        f"Total files to be filtered {report.task.files_total} "
        f"with the size {humanize_bytes(report.task.files_total_size)}"
    )
    print()


def _print_dir_summary(status_map: dict[str, RemoteStatus]) -> None:
    live_paths = [path for path, status in status_map.items() if status.is_live]
    print(f"\n{COLOR_TITLE}📂 生存ファイル: {len(live_paths)} 件{COLOR_RESET}")
    for line in format_dir_tree(build_dir_tree(live_paths)):
        print(line)
    print()


def print_group_summary(selection: Selection) -> None:
    """グループ内の各ファイルを残すか削除するか表示"""
    print("\nGroup summary")

    # "✓ File "" (size) will be deleted (excluded-last)" の分を引いておく
    max_path_width = max(20, get_term_width() - 50)
    for file in selection.files:
        verdict = selection.verdicts[file.file_id]
        path = truncate_to_width(file.path, max_path_width)
        size = f"{COLOR_SIZE}{humanize_bytes(file.size)}{COLOR_RESET}"
        if verdict.reason is not None:
            print(
                f'{COLOR_ERROR}X{COLOR_RESET} File "{path}" ({size}) will be deleted '
                f"({COLOR_REASON}{verdict.reason.value}{COLOR_RESET})"
            )
        else:
            print(f'{COLOR_SUCCESS}✓{COLOR_RESET} File "{path}" ({size}) will be kept')
    print()


def _print_fallback(selection: Selection) -> None:
    if selection.fallback == "all-deleted":
        print(
            f"{COLOR_WARNING}⚠️  All files are marked for deletion. Keeping the first file that "
            f"doesn't match include list or the first if the whole list is included.{COLOR_RESET}"
        )
    elif selection.fallback == "none-deleted":
        print(f"{COLOR_WARNING}⚠️  No files to delete (maybe all excluded), keeping just the first.{COLOR_RESET}")


def _print_final_summary(report: Report, totals: DeletionTotals, dry_run: bool) -> None:
    print(f"{COLOR_SUCCESS}✅ Finished deleting duplicates{COLOR_RESET}")
    print(f"Processed {len(report.groups)} groups.")
    print(
        f"Deleted {COLOR_ERROR}{totals.deleted_count}{COLOR_RESET} "
        f"({humanize_bytes(totals.deleted_bytes)}) out of {report.file_count} "
        f"({humanize_bytes(report.file_size)}) files."
    )
    if totals.failed_count:
        print(f"{COLOR_WARNING}⚠️  {totals.failed_count} 件の削除に失敗しました{COLOR_RESET}")
    if dry_run:
        print(f"{COLOR_DIM}(dry run: 実際には何も削除していません){COLOR_RESET}")


def _finish_cache(cache: MetadataCache, dry_run: bool) -> None:
    if not cache.enabled or not cache.path.exists():
        return
    if dry_run:
        print(f"{COLOR_DIM}📦 Leaving files info cached in {os.path.relpath(cache.path)}{COLOR_RESET}")
    else:
        cache.remove()


def resolve_statuses(
    report: Report,
    client: StatClient,
    cache: MetadataCache,
    manager: enlighten.Manager,
) -> dict[str, RemoteStatus]:
    """全パスの状態をプログレスバー付きで取得"""
    paths = report.unique_paths()
    progress = manager.counter(
        total=len(paths),
        desc="🔍 Getting files latest information",
        unit="件",
        bar_format="{desc}{desc_pad}{percentage:3.0f}%|{bar}| {count:,d}/{total:,d} {unit} [{elapsed}<{eta}]",
    )

    def on_resolved(_: int) -> None:
        progress.update()

    try:
        return MetadataResolver(client, cache).resolve(paths, on_resolved)
    finally:
        progress.close()


def process_groups(
    report: Report,
    status_map: dict[str, RemoteStatus],
    rules: RuleSet,
    executor: DeletionExecutor,
) -> DeletionTotals:
    """グループ毎に残すファイルを決めて削除"""

    def is_live(path: str) -> bool:
        status = status_map.get(path)
        return status is not None and status.is_live

    for group in report.groups:
        print(f"Processing group {group.group_id} ({len(group.files)} files scanned)")
        selection = select(group, is_live, rules)

        if not selection.files:
            print(f"{COLOR_DIM}No files left in this group{COLOR_RESET}")
            continue
        if len(selection.files) == 1:
            print(f"{COLOR_DIM}No duplicates in this group{COLOR_RESET}")
            continue

        for file in selection.files:
            if rules.is_excluded(file.path) and selection.verdicts[file.file_id].keep:
                print(f'{COLOR_DIM}File "{file.path}" is in exclude list. Skipping...{COLOR_RESET}')

        _print_fallback(selection)
        print_group_summary(selection)

        print("Starting deletion...")
        executor.apply(selection)
        print(f"Done processing group {group.group_id}\n")

    return executor.totals


def run_dedupe(options: DedupeOptions, client: RemoteClient | None = None) -> DeletionTotals:
    """重複グループを読み込み、各グループで 1 ファイルだけ残して削除する

    Raises:
        InvalidReportError: 入力 JSON の形式が不正な場合（削除処理の前に送出）
    """
    _print_parameters(options)
    report = load_report(options.json_path)
    _print_task(report)

    cache = MetadataCache(options.cache_path, enabled=options.cache_info)
    cached = cache.load()
    if cached:
        print(f"{COLOR_DIM}📦 キャッシュから {cached} 件を読み込みました{COLOR_RESET}")

    own_client = client is None
    remote: RemoteClient = client or WebDavClient(options.base_url, options.user, options.password)

    manager = enlighten.Manager()
    try:
        status_map = resolve_statuses(report, remote, cache, manager)

        _print_dir_summary(status_map)

        rules = RuleSet.build(options.exclude, options.include)
        executor = DeletionExecutor(remote, dry_run=options.dry_run)
        totals = process_groups(report, status_map, rules, executor)

        _print_final_summary(report, totals, options.dry_run)
        _finish_cache(cache, options.dry_run)
        return totals

    except KeyboardInterrupt:
        cache.save()
        print(f"\n{COLOR_WARNING}⏹️  中断しました{COLOR_RESET}")
        sys.exit(130)
    finally:
        manager.stop()
        if own_client and isinstance(remote, WebDavClient):
            remote.close()
