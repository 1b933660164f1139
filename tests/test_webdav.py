#!/usr/bin/env python3
"""
webdav.py のユニットテスト
"""
# ruff: noqa: S101

import httpx
import pytest

from massdedupe.webdav import (
    RemoteError,
    RemoteNotFoundError,
    RemoteStat,
    WebDavClient,
    build_base_url,
)

BASE_URL = "https://cloud.example.com:443/remote.php/dav/files/alice"

FILE_RESPONSE = """<?xml version="1.0"?>
<d:multistatus xmlns:d="DAV:">
  <d:response>
    <d:href>/remote.php/dav/files/alice/Photos/My%20Trip/a.jpg</d:href>
    <d:propstat>
      <d:prop>
        <d:getlastmodified>Tue, 01 Aug 2023 10:00:00 GMT</d:getlastmodified>
        <d:getcontentlength>2048</d:getcontentlength>
        <d:getcontenttype>image/jpeg</d:getcontenttype>
        <d:getetag>"5f2c"</d:getetag>
        <d:resourcetype/>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>
"""

DIR_RESPONSE = """<?xml version="1.0"?>
<d:multistatus xmlns:d="DAV:">
  <d:response>
    <d:href>/remote.php/dav/files/alice/Photos/</d:href>
    <d:propstat>
      <d:prop>
        <d:resourcetype><d:collection/></d:resourcetype>
      </d:prop>
    </d:propstat>
  </d:response>
</d:multistatus>
"""


def _client(handler) -> WebDavClient:
    return WebDavClient(BASE_URL, "alice", "secret", transport=httpx.MockTransport(handler))


class TestBuildBaseUrl:
    """build_base_url のテスト"""

    def test_user_placeholder(self):
        """{USER} をユーザー名に置換"""
        url = build_base_url("https", "cloud.example.com", 443, "remote.php/dav/files/{USER}", "alice")
        assert url == BASE_URL

    def test_strip_slashes(self):
        """前後のスラッシュを除去"""
        assert build_base_url("http", "host", 8080, "/dav/", "bob") == "http://host:8080/dav"


class TestStat:
    """WebDavClient.stat のテスト"""

    def test_file(self):
        """ファイル情報を解析"""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(207, text=FILE_RESPONSE)

        with _client(handler) as client:
            stat = client.stat("Photos/My Trip/a.jpg")

        assert stat == RemoteStat(
            filename="/Photos/My Trip/a.jpg",
            basename="a.jpg",
            size=2048,
            type="file",
            lastmod="Tue, 01 Aug 2023 10:00:00 GMT",
            etag="5f2c",
            mime="image/jpeg",
        )
        request = requests[0]
        assert request.method == "PROPFIND"
        assert request.headers["Depth"] == "0"
        assert request.headers["Authorization"].startswith("Basic ")
        assert request.url.raw_path.decode() == "/remote.php/dav/files/alice/Photos/My%20Trip/a.jpg"

    def test_directory(self):
        """ディレクトリ判定"""
        client = _client(lambda request: httpx.Response(207, text=DIR_RESPONSE))
        stat = client.stat("Photos")
        assert stat.type == "directory"
        assert stat.size == 0

    def test_not_found(self):
        """404 は RemoteNotFoundError"""
        client = _client(lambda request: httpx.Response(404))
        with pytest.raises(RemoteNotFoundError):
            client.stat("missing.jpg")

    def test_server_error(self):
        """5xx は RemoteError（NotFound ではない）"""
        client = _client(lambda request: httpx.Response(503))
        with pytest.raises(RemoteError) as exc_info:
            client.stat("a.jpg")
        assert not isinstance(exc_info.value, RemoteNotFoundError)

    def test_transport_error(self):
        """接続エラーは RemoteError に変換"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteError):
            _client(handler).stat("a.jpg")

    def test_unencodable_path(self):
        """URL にできないパスも RemoteError に変換し、送信しない"""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(207, text=DIR_RESPONSE)

        with pytest.raises(RemoteError):
            _client(handler).stat("bad\ud800.jpg")
        assert requests == []

    def test_broken_xml(self):
        """解析できない応答"""
        client = _client(lambda request: httpx.Response(207, text="<not-xml"))
        with pytest.raises(RemoteError):
            client.stat("a.jpg")


class TestDelete:
    """WebDavClient.delete のテスト"""

    def test_delete(self):
        """DELETE を送る"""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(204)

        _client(handler).delete("dir/a.jpg")
        assert requests[0].method == "DELETE"
        assert requests[0].url.raw_path.decode() == "/remote.php/dav/files/alice/dir/a.jpg"

    def test_delete_not_found(self):
        """既に無いファイル"""
        client = _client(lambda request: httpx.Response(404))
        with pytest.raises(RemoteNotFoundError):
            client.delete("a.jpg")

    def test_delete_locked(self):
        """ロック中"""
        client = _client(lambda request: httpx.Response(423))
        with pytest.raises(RemoteError):
            client.delete("a.jpg")
