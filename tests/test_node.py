import io

import pytest

from ipfiles.node import (
    DirEntry,
    FilesError,
    NotDirectoryError,
    NotReaderError,
    NotSupportedError,
    dir_from_entry,
    file_from_entry,
    to_dir,
    to_file,
)
from ipfiles.readerfile import new_bytes_file, new_reader_file
from ipfiles.slicedirectory import FileEntry, new_map_directory


def test_to_file_accepts_files_only():
    f = new_bytes_file(b"beep")
    d = new_map_directory({"a": f})
    assert to_file(f) is f
    assert to_file(d) is None
    assert to_file(None) is None


def test_to_dir_accepts_directories_only():
    f = new_bytes_file(b"beep")
    d = new_map_directory({"a": f})
    assert to_dir(d) is d
    assert to_dir(f) is None


def test_entry_helpers():
    f = new_bytes_file(b"boop")
    d = new_map_directory({})
    file_entry = FileEntry("f", f)
    dir_entry = FileEntry("d", d)
    assert isinstance(file_entry, DirEntry)
    assert file_from_entry(file_entry) is f
    assert file_from_entry(dir_entry) is None
    assert dir_from_entry(dir_entry) is d
    assert dir_from_entry(file_entry) is None


def test_error_messages_and_hierarchy():
    assert str(NotDirectoryError()) == "file isn't a directory"
    assert str(NotReaderError()) == "file isn't a regular file"
    assert str(NotSupportedError()) == "operation not supported"
    for cls in (NotDirectoryError, NotReaderError, NotSupportedError):
        with pytest.raises(FilesError):
            raise cls()


def test_node_context_manager_closes():
    stream = io.BytesIO(b"data")
    with new_reader_file(stream) as f:
        assert f.read() == b"data"
    assert stream.closed


def test_directory_is_iterable():
    d = new_map_directory({"x": new_bytes_file(b"1"), "y": new_bytes_file(b"2")})
    assert [entry.name for entry in d] == ["x", "y"]