"""実行オプション"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .constants import CACHE_SUFFIX, DEFAULT_DAV_PATH
from .webdav import build_base_url


@dataclass(frozen=True)
class DedupeOptions:
    json_path: str
    host: str
    user: str
    password: str
    port: int = 443
    proto: str = "https"
    dav_path: str = DEFAULT_DAV_PATH
    cache_info: bool = True
    dry_run: bool = False
    exclude: tuple[str, ...] = ()
    include: tuple[str, ...] = ()

    @property
    def base_url(self) -> str:
        return build_base_url(self.proto, self.host, self.port, self.dav_path, self.user)

    @property
    def cache_path(self) -> Path:
        return Path(self.json_path + CACHE_SUFFIX)

    def masked(self) -> "DedupeOptions":
        """表示用（パスワードを伏せる）"""
        return replace(self, password="***")


def options_from_args(args: dict[str, Any]) -> DedupeOptions:
    """docopt の結果から DedupeOptions を作る"""
    try:
        port = int(args["--port"])
    except (TypeError, ValueError) as e:
        raise ValueError(f"--port が不正です: {args['--port']!r}") from e

    return DedupeOptions(
        json_path=args["JSON"],
        host=args["--host"],
        user=args["--user"],
        password=args["--password"],
        port=port,
        proto=args["--proto"],
        dav_path=args["--path"],
        cache_info=not args["--no-cache"],
        dry_run=bool(args["--dry-run"]),
        exclude=tuple(args["--exclude"] or ()),
        include=tuple(args["--include"] or ()),
    )
