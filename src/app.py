#!/usr/bin/env python3

"""
MediaDC が出力した重複グループをもとに、Nextcloud 上の重複ファイルを削除するツールです．
各グループでサイズが大きく、パスが短いファイルを 1 つだけ残します．

Usage:
  app.py -H HOST -u USER -p PASSWORD [--port=PORT] [--proto=PROTO] [--path=DAV_PATH]
         [-x PATTERN]... [-i PATTERN]... [--no-cache] [-d] [-D] JSON
  app.py -h | --help

Options:
  JSON                           MediaDC からエクスポートした JSON ファイル
  -H HOST, --host=HOST           WebDAV のホスト名（http(s) なし）
  -u USER, --user=USER           WebDAV のユーザー名
  -p PASSWORD, --password=PASSWORD  WebDAV のパスワード
  --port=PORT                    WebDAV のポート番号 [default: 443]
  --proto=PROTO                  WebDAV のプロトコル [default: https]
  --path=DAV_PATH                WebDAV のベースパス [default: remote.php/dav/files/{USER}]
  -x PATTERN, --exclude=PATTERN  パスにこの文字列を含むファイルは残す（大文字小文字を区別しない）
  -i PATTERN, --include=PATTERN  パスにこの文字列を含むファイルを優先して削除する（大文字小文字を区別しない）
  --no-cache                     取得したファイル情報をキャッシュしない
  -d, --dry-run                  実際には削除しない
  -D, --debug                    デバッグログを出力する
  -h, --help                     このヘルプを表示
"""

import logging
import sys

from docopt import docopt

from massdedupe import InvalidReportError, run_dedupe
from massdedupe.config import options_from_args
from massdedupe.constants import COLOR_ERROR, COLOR_RESET


def main() -> None:
    assert __doc__ is not None
    args = docopt(__doc__)

    logging.basicConfig(
        level=logging.DEBUG if args["--debug"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # httpx のリクエストログは --debug 時のみ
    logging.getLogger("httpx").setLevel(logging.DEBUG if args["--debug"] else logging.WARNING)

    try:
        options = options_from_args(args)
        run_dedupe(options)
    except InvalidReportError as e:
        print(f"{COLOR_ERROR}❌ Invalid json: {e}{COLOR_RESET}", file=sys.stderr)
        print(
            f"{COLOR_ERROR}Please use the exported data from mediadc in the json format.{COLOR_RESET}",
            file=sys.stderr,
        )
        sys.exit(1)
    except (ValueError, OSError) as e:
        print(f"{COLOR_ERROR}❌ {e}{COLOR_RESET}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
