"""Shared pytest fixtures for integration and unit tests."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Generator, TypedDict

import pytest

from tests.utils.http import reserve_port, wait_for_port

if TYPE_CHECKING:
    from _pytest.tmpdir import TempPathFactory

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SERVER_ENTRYPOINT = PROJECT_ROOT / "main.py"


class ServerProcessInfo(TypedDict):
    """Metadata describing a running server fixture instance."""

    base_url: str
    host: str
    port: int
    document_root: Path
    process: subprocess.Popen[str]
    log_file: Path


def _launch_server(
    host: str, port: int, document_root: Path, log_file: Path
) -> Generator[ServerProcessInfo, None, None]:
    args = [
        sys.executable,
        str(SERVER_ENTRYPOINT),
        "--document-root",
        str(document_root),
        "--host",
        host,
        "--port",
        str(port),
        "--log-destination",
        str(log_file),
        "--shutdown-grace-seconds",
        "2",
    ]

    with subprocess.Popen(
        args,
        cwd=PROJECT_ROOT,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    ) as process:
        try:
            wait_for_port(host, port)
        except Exception:
            process.terminate()
            stdout, stderr = process.communicate(timeout=5)
            print(f"\nServer stdout:\n{stdout}")
            print(f"\nServer stderr:\n{stderr}")
            raise

        yield {
            "base_url": f"http://{host}:{port}",
            "host": host,
            "port": port,
            "document_root": document_root,
            "process": process,
            "log_file": log_file,
        }

        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()


@pytest.fixture(name="document_root")
def _document_root(tmp_path_factory: "TempPathFactory") -> Path:
    """Document root seeded with an index page and a stylesheet."""

    root = tmp_path_factory.mktemp("static")
    (root / "index.html").write_text("<h1>Index</h1>")
    (root / "style.css").write_text("body { color: black; }")
    (root / "assets").mkdir()
    return root


@pytest.fixture(name="server_process")
def _server_process(
    document_root: Path, tmp_path_factory: "TempPathFactory"
) -> Generator[ServerProcessInfo, None, None]:
    """Launch the server in a background process for integration tests."""

    host = "127.0.0.1"
    port = reserve_port(host)
    log_file = tmp_path_factory.mktemp("logs") / "server.log"
    yield from _launch_server(host, port, document_root, log_file)


@pytest.fixture()
def base_url(server_process: ServerProcessInfo) -> str:
    """Expose the running server base URL to integration tests."""

    return server_process["base_url"]
