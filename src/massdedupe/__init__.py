"""massdedupe - MediaDC の重複レポートをもとに Nextcloud 上の重複ファイルを削除するツール"""

from .config import DedupeOptions
from .report import InvalidReportError, load_report
from .resolver import MetadataResolver, RemoteStatus
from .selector import RuleSet, select
from .ui import run_dedupe

__all__ = [
    "DedupeOptions",
    "InvalidReportError",
    "MetadataResolver",
    "RemoteStatus",
    "RuleSet",
    "load_report",
    "run_dedupe",
    "select",
]
