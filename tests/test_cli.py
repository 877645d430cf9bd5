import io
import json

from PIL import Image

from mandelrender.cli import main
from mandelrender.zoompoints import point_names

SMALL = ["--log-file", "", "--log-level", "WARNING", "--width", "16", "--height", "12"]


def test_render_with_manifest(tmp_path):
    out = tmp_path / "mande.png"
    manifest = tmp_path / "artifacts" / "run.json"
    rc = main(SMALL + ["--zoom-point", "overview", "render", "--output", str(out), "--manifest", str(manifest)])
    assert rc == 0
    with Image.open(out) as img:
        assert img.size == (16, 12)

    data = json.loads(manifest.read_text())
    assert data["zoom_point"]["name"] == "overview"
    assert data["config"]["width"] == 16
    assert data["output"] == str(out)


def test_seeded_random_render(tmp_path):
    out = tmp_path / "mande.png"
    assert main(SMALL + ["--seed", "11", "render", "--output", str(out)]) == 0
    assert out.exists()


def test_output_failure_returns_error(tmp_path):
    out = tmp_path / "missing" / "mande.png"
    assert main(SMALL + ["--zoom-point", "overview", "render", "--output", str(out)]) == 1
    assert not out.exists()


def test_points_lists_registry(capsys):
    assert main(["points"]) == 0
    printed = capsys.readouterr().out
    for name in point_names():
        assert name in printed


def test_manifest_failure_returns_error(tmp_path):
    out = tmp_path / "mande.png"
    # a directory cannot be opened as the manifest file
    rc = main(SMALL + ["--zoom-point", "overview", "render", "--output", str(out), "--manifest", str(tmp_path)])
    assert rc == 1
    assert out.exists()


def test_cgi_writes_response_to_stdout(capsysbinary):
    assert main(SMALL + ["--zoom-point", "overview", "cgi"]) == 0
    raw = capsysbinary.readouterr().out
    head, body = raw.split(b"\r\n\r\n", 1)
    assert b"Content-Type: image/png" in head.split(b"\r\n")
    assert body.startswith(b"\x89PNG")
    with Image.open(io.BytesIO(body)) as img:
        assert img.size == (16, 12)


def test_serve_wiring(monkeypatch):
    calls = []
    monkeypatch.setattr("mandelrender.cli.serve_http", lambda cfg, rng, queue: calls.append((cfg, queue)))
    assert main(SMALL + ["serve", "--host", "127.0.0.1", "--port", "9099"]) == 0
    cfg, queue = calls[0]
    assert (cfg["host"], cfg["port"], cfg["width"]) == ("127.0.0.1", 9099, 16)
    assert queue is not None
