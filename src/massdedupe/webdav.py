"""WebDAV クライアント（Nextcloud の stat / delete のみ）"""

import logging
import posixpath
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

_DAV_NS = "{DAV:}"

_PROPFIND_BODY = """<?xml version="1.0" encoding="utf-8"?>
<d:propfind xmlns:d="DAV:">
  <d:prop>
    <d:getlastmodified/>
    <d:getcontentlength/>
    <d:getcontenttype/>
    <d:getetag/>
    <d:resourcetype/>
  </d:prop>
</d:propfind>
"""


class RemoteError(Exception):
    """WebDAV サーバーとの通信エラー"""


class RemoteNotFoundError(RemoteError):
    """指定パスが存在しない（404）"""


@dataclass(frozen=True)
class RemoteStat:
    """WebDAV 上のファイル情報"""

    filename: str
    basename: str
    size: int
    type: str  # "file" または "directory"
    lastmod: str = ""
    etag: str = ""
    mime: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RemoteStat":
        return cls(
            filename=str(data["filename"]),
            basename=str(data.get("basename", posixpath.basename(data["filename"]))),
            size=int(data.get("size", 0)),
            type=str(data.get("type", "file")),
            lastmod=str(data.get("lastmod", "")),
            etag=str(data.get("etag", "")),
            mime=str(data.get("mime", "")),
        )


def build_base_url(proto: str, host: str, port: int, path: str, user: str) -> str:
    """WebDAV のベース URL を組み立てる（path 中の {USER} はユーザー名に置換）"""
    path = path.replace("{USER}", user).strip("/")
    return f"{proto}://{host}:{port}/{path}"


def _parse_propstat(xml_text: str, path: str) -> RemoteStat:
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise RemoteError(f"PROPFIND の応答を解析できません: {e}") from e

    prop = root.find(f"{_DAV_NS}response/{_DAV_NS}propstat/{_DAV_NS}prop")
    if prop is None:
        raise RemoteError("PROPFIND の応答に prop がありません")

    def text(tag: str) -> str:
        elem = prop.find(f"{_DAV_NS}{tag}")
        return (elem.text or "").strip() if elem is not None else ""

    resource_type = prop.find(f"{_DAV_NS}resourcetype")
    is_dir = resource_type is not None and resource_type.find(f"{_DAV_NS}collection") is not None

    filename = "/" + path.strip("/")
    size = text("getcontentlength")
    return RemoteStat(
        filename=filename,
        basename=posixpath.basename(filename),
        size=int(size) if size.isdigit() else 0,
        type="directory" if is_dir else "file",
        lastmod=text("getlastmodified"),
        etag=text("getetag").strip('"'),
        mime=text("getcontenttype"),
    )


class WebDavClient:
    """stat と delete だけを提供する WebDAV クライアント

    path には "files/" を除去済みのパスを渡す。
    """

    def __init__(
        self,
        base_url: str,
        user: str,
        password: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = httpx.Client(
            auth=(user, password),
            timeout=timeout,
            transport=transport,
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{quote(path.lstrip('/'))}"

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            url = self._url(path)
            logger.debug("%s %s", method, url)
            response = self._http.request(method, url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
            raise RemoteError(f"{method} {path!r} に失敗しました: {e}") from e

        if response.status_code == 404:
            raise RemoteNotFoundError(f"{path} が見つかりません")
        if response.status_code >= 400:
            raise RemoteError(f"{method} {path} が {response.status_code} を返しました")
        return response

    def stat(self, path: str) -> RemoteStat:
        """ファイル情報を取得

        Raises:
            RemoteNotFoundError: 存在しない場合
            RemoteError: その他の通信エラー
        """
        response = self._request(
            "PROPFIND",
            path,
            headers={"Depth": "0", "Content-Type": "application/xml; charset=utf-8"},
            content=_PROPFIND_BODY.encode("utf-8"),
        )
        return _parse_propstat(response.text, path)

    def delete(self, path: str) -> None:
        """ファイルを削除（Nextcloud 側ではゴミ箱へ移動される）"""
        self._request("DELETE", path)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "WebDavClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
