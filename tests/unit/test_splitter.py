import json
from pathlib import Path

import pytest

from app.models.schemas import (
    FILENAME,
    MARKER,
    ORIGINAL_FILE,
    RELATIVE_PATH,
    ConsumerMode,
    DiscoveredFile,
    FileMarker,
    Mark,
)
from domains.file_source.errors import SplitError
from domains.file_source.splitter import FileSplitter


def discover(path: Path) -> DiscoveredFile:
    stats = path.stat()
    return DiscoveredFile(
        path=path,
        root=path.parent,
        relative_path=path.name,
        size=stats.st_size,
        last_modified=stats.st_mtime,
    )


@pytest.fixture
def sample(tmp_path):
    path = tmp_path / "test.txt"
    path.write_bytes(b"this is a test\nline2\n")
    return discover(path)


def test_ref_mode_payload_is_path(sample):
    messages = FileSplitter(mode=ConsumerMode.REF).build(sample)

    assert len(messages) == 1
    assert messages[0].payload == sample.path


def test_every_message_carries_file_headers(sample):
    for mode in ConsumerMode:
        for message in FileSplitter(mode=mode, with_markers=True).build(sample):
            assert message.headers[FILENAME] == "test.txt"
            assert message.headers[RELATIVE_PATH] == "test.txt"
            assert message.headers[ORIGINAL_FILE] == sample.path
            assert message.headers["id"]
            assert message.headers["timestamp"]


def test_contents_mode_binary(sample):
    messages = FileSplitter(mode=ConsumerMode.CONTENTS).build(sample)

    assert messages[0].payload == b"this is a test\nline2\n"


def test_contents_mode_text_preserves_terminators(tmp_path):
    path = tmp_path / "crlf.txt"
    path.write_bytes(b"one\r\ntwo\r\n")

    messages = FileSplitter(mode=ConsumerMode.CONTENTS, binary=False).build(discover(path))

    assert messages[0].payload == "one\r\ntwo\r\n"


def test_lines_mode(sample):
    messages = FileSplitter(mode=ConsumerMode.LINES).build(sample)

    assert [m.payload for m in messages] == ["this is a test", "line2"]


def test_lines_mode_strips_mixed_terminators(tmp_path):
    path = tmp_path / "mixed.txt"
    path.write_bytes(b"a\r\nb\rc\nlast")

    messages = FileSplitter(mode=ConsumerMode.LINES).build(discover(path))

    assert [m.payload for m in messages] == ["a", "b", "c", "last"]


def test_lines_mode_with_json_markers(sample):
    messages = FileSplitter(mode=ConsumerMode.LINES, with_markers=True).build(sample)

    assert len(messages) == 4
    start = json.loads(messages[0].payload)
    end = json.loads(messages[3].payload)
    assert start["mark"] == "START"
    assert [m.payload for m in messages[1:3]] == ["this is a test", "line2"]
    assert end["mark"] == "END"
    assert end["lineCount"] == 2
    assert end["filePath"] == str(sample.path)
    assert messages[0].headers[MARKER] == "START"
    assert messages[3].headers[MARKER] == "END"
    assert MARKER not in messages[1].headers


def test_lines_mode_with_marker_objects(sample):
    messages = FileSplitter(
        mode=ConsumerMode.LINES, with_markers=True, markers_json=False
    ).build(sample)

    end = messages[-1].payload
    assert isinstance(end, FileMarker)
    assert end.mark is Mark.END
    assert end.line_count == 2


def test_empty_file_still_gets_markers(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_bytes(b"")

    messages = FileSplitter(
        mode=ConsumerMode.LINES, with_markers=True, markers_json=False
    ).build(discover(path))

    assert [m.payload.mark for m in messages] == [Mark.START, Mark.END]
    assert messages[-1].payload.line_count == 0


def test_missing_file_raises_split_error(sample):
    sample.path.unlink()

    with pytest.raises(SplitError):
        FileSplitter(mode=ConsumerMode.CONTENTS).build(sample)


def test_undecodable_file_raises_split_error(tmp_path):
    path = tmp_path / "binary.dat"
    path.write_bytes(b"\xff\xfe\xfa")

    with pytest.raises(SplitError):
        FileSplitter(mode=ConsumerMode.LINES).build(discover(path))
