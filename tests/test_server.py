import io
import threading
import urllib.error
import urllib.request

import pytest
from PIL import Image

from mandelrender.config import normalise_config
from mandelrender.server import make_server, serve_cgi
from mandelrender.zoompoints import make_rng


def _cfg(**kw):
    base = {"width": 16, "height": 12, "zoom_point": "overview", "host": "127.0.0.1", "port": 0}
    base.update(kw)
    return normalise_config(base)


def _split_cgi(raw):
    head, body = raw.split(b"\r\n\r\n", 1)
    lines = head.decode("latin-1").split("\r\n")
    return [tuple(line.split(": ", 1)) for line in lines], body


def test_cgi_response():
    out = io.BytesIO()
    serve_cgi(_cfg(), out, make_rng(1))
    headers, body = _split_cgi(out.getvalue())

    assert ("Content-Type", "image/png") in headers
    assert ("Pragma", "no-cache") in headers
    assert [v for k, v in headers if k == "Cache-Control"] == [
        "no-store, no-cache, must-revalidate, max-age=0",
        "post-check=0, pre-check=0",
    ]
    assert dict(headers)["Content-Length"] == str(len(body))
    with Image.open(io.BytesIO(body)) as img:
        assert img.size == (16, 12)


@pytest.fixture
def http_server():
    servers = []

    def start(cfg):
        server = make_server(cfg, make_rng(5))
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append((server, thread))
        host, port = server.server_address[:2]
        return f"http://{host}:{port}/"

    yield start

    for server, thread in servers:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


def test_http_renders_per_request(http_server):
    url = http_server(_cfg())
    for _ in range(2):
        with urllib.request.urlopen(url, timeout=30) as resp:
            assert resp.status == 200
            assert resp.headers["Content-Type"] == "image/png"
            assert resp.headers["Pragma"] == "no-cache"
            assert "no-store" in ", ".join(resp.headers.get_all("Cache-Control"))
            body = resp.read()
        with Image.open(io.BytesIO(body)) as img:
            assert img.size == (16, 12)


def test_http_render_failure_is_500(http_server):
    cfg = _cfg()
    cfg["intensity"] = "gamma"
    url = http_server(cfg)
    with pytest.raises(urllib.error.HTTPError) as exc:
        urllib.request.urlopen(url, timeout=30)
    assert exc.value.code == 500
