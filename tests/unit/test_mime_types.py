"""
Unit tests for the extension → MIME type table.
"""

import pytest

from mediaserver.http.mime_types import MIME_TYPES, DEFAULT_MIME_TYPE, get_mime_type


@pytest.mark.parametrize("filename,expected", [
    ("photo.jpg", "image/jpeg"),
    ("photo.jpeg", "image/jpeg"),
    ("icon.png", "image/png"),
    ("anim.gif", "image/gif"),
    ("pic.webp", "image/webp"),
    ("clip.mp4", "video/mp4"),
    ("clip.webm", "video/webm"),
    ("sound.wav", "audio/wav"),
    ("song.mp3", "audio/mpeg"),
    ("voice.m4a", "audio/mp4"),
    ("stream/index.m3u8", "application/vnd.apple.mpegurl"),
    ("stream/segment003.ts", "video/mp2t"),
    ("doc.pdf", "application/pdf"),
    ("notes.txt", "text/plain"),
    ("data.json", "application/json"),
])
def test_known_extensions(filename, expected):
    assert get_mime_type(filename) == expected


def test_extension_is_case_insensitive():
    assert get_mime_type("/srv/media/photos/CAT.JPG") == "image/jpeg"
    assert get_mime_type("Intro.Mp4") == "video/mp4"


def test_only_last_extension_counts():
    assert get_mime_type("archive.mp4.exe") == DEFAULT_MIME_TYPE
    assert get_mime_type("backup.tar.json") == "application/json"


@pytest.mark.parametrize("filename", ["README", "script.php", "page.html", "dir.d/file"])
def test_unknown_falls_back_to_octet_stream(filename):
    assert get_mime_type(filename) == "application/octet-stream"


def test_custom_default():
    assert get_mime_type("README", default="text/plain") == "text/plain"


def test_table_is_read_only():
    with pytest.raises(TypeError):
        MIME_TYPES["exe"] = "application/x-msdownload"
