"""
pytest configuration and fixtures.
"""

import os
import socket
import threading
import time
from pathlib import Path
from typing import Callable, Generator
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mediaserver import MediaServer, ServerConfig
from mediaserver.handlers import MediaHandler, PathResolver


# 1000 bytes whose value at offset i is i % 256, so slices are easy to check
CLIP_BYTES = bytes(i % 256 for i in range(1000))
NOTES_TEXT = b"hello media\n"


@pytest.fixture
def media_root(tmp_path: Path) -> Path:
    """
    A media root next to a private sibling directory:

        tmp/
        ├── media/
        │   ├── clip.mp4              1000 bytes
        │   ├── notes.txt
        │   ├── README                no extension
        │   ├── empty.mp3             0 bytes
        │   ├── photos/cat.JPG
        │   └── escape -> ../private  symlink out of the root
        └── private/secret.txt
    """
    root = tmp_path / "media"
    root.mkdir()
    (root / "clip.mp4").write_bytes(CLIP_BYTES)
    (root / "notes.txt").write_bytes(NOTES_TEXT)
    (root / "README").write_bytes(b"readme")
    (root / "empty.mp3").write_bytes(b"")
    (root / "photos").mkdir()
    (root / "photos" / "cat.JPG").write_bytes(b"\xff\xd8\xff\xe0jpeg")

    private = tmp_path / "private"
    private.mkdir()
    (private / "secret.txt").write_bytes(b"secret")

    try:
        os.symlink(private, root / "escape", target_is_directory=True)
    except (OSError, NotImplementedError):
        pass  # Symlink tests skip themselves

    return root


@pytest.fixture
def resolver(media_root: Path) -> PathResolver:
    return PathResolver(str(media_root), dev_path_prefix="media.example.com")


@pytest.fixture
def handler(resolver: PathResolver) -> MediaHandler:
    return MediaHandler(resolver)


@pytest.fixture
def config(media_root: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        media_root=str(media_root),
        dev_path_prefix="media.example.com",
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: MediaServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True
        )
        self._thread.start()

        # Wait for server to be ready
        for _ in range(50):  # 5 seconds max
            try:
                with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                    s.connect(('127.0.0.1', self.port))
                    return
            except ConnectionRefusedError:
                time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.stop()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(config: ServerConfig, free_port: int) -> Generator[TestServer, None, None]:
    """A running media server on a free port."""
    server = MediaServer(config)

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def start_server(free_port: int) -> Generator[Callable[[MediaServer], TestServer], None, None]:
    """Run a custom-built MediaServer on a free port; stopped after the test."""
    started = []

    def start(server: MediaServer) -> TestServer:
        test_srv = TestServer(server, free_port)
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield start

    for test_srv in started:
        test_srv.stop()
