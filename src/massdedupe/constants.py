"""定数・型定義"""

# Nextcloud の「ファイル」名前空間のルート（WebDAV のキーにする前に除去する）
FILES_PREFIX = "files/"

# ゴミ箱（この接頭辞を持つパスは問い合わせずに「存在しない」とみなす）
TRASH_PREFIX = "files_trashbin"

# キャッシュを書き出す間隔（問い合わせ件数）
CACHE_FLUSH_INTERVAL = 500

# キャッシュファイルの拡張子（入力 JSON の隣に保存）
CACHE_SUFFIX = ".cache"

# WebDAV の既定ベースパス
DEFAULT_DAV_PATH = "remote.php/dav/files/{USER}"

# ANSI256 カラー（黒背景に合う落ち着いた色）
COLOR_TITLE = "\033[38;5;67m"  # スチールブルー
COLOR_SUCCESS = "\033[38;5;72m"  # シアングリーン
COLOR_WARNING = "\033[38;5;180m"  # ライトサーモン
COLOR_ERROR = "\033[38;5;167m"  # インディアンレッド
COLOR_DIM = "\033[38;5;242m"  # ミディアムグレー
COLOR_SIZE = "\033[38;5;110m"  # ライトスカイブルー
COLOR_REASON = "\033[38;5;175m"  # ライトマゼンタ
COLOR_RESET = "\033[0m"
