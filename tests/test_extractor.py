import io
import os
import tarfile
import time

import pytest

from ipfiles.extractor import (
    ExtractedDirToSymlinkError,
    ExtractError,
    Extractor,
    InvalidRootError,
    TraverseSymlinkError,
    copy_with_progress,
    get_relative_path,
    validate_tar_path,
)

TAR_OUT_ROOT = "tar-out-root"


def dir_entry(path):
    return ("dir", path, None)


def file_entry(path, data):
    return ("file", path, data)


def symlink_entry(target, path):
    return ("symlink", path, target)


def write_tar(path, entries):
    with tarfile.open(path, "w") as tar:
        for kind, name, value in entries:
            info = tarfile.TarInfo(name)
            if kind == "dir":
                info.type = tarfile.DIRTYPE
                info.mode = 0o777
                info.mtime = int(time.time())
                tar.addfile(info)
            elif kind == "file":
                info.type = tarfile.REGTYPE
                info.mode = 0o644
                info.size = len(value)
                info.mtime = int(time.time())
                tar.addfile(info, io.BytesIO(value))
            elif kind == "symlink":
                info.type = tarfile.SYMTYPE
                info.linkname = value
                info.mode = 0o777
                tar.addfile(info)
            else:
                info.type = tarfile.FIFOTYPE
                tar.addfile(info)


def run_extraction(root_dir, entries, setup=None, progress=None):
    extract_dir = root_dir / TAR_OUT_ROOT
    extract_dir.mkdir(parents=True, exist_ok=True)
    if setup is not None:
        setup(root_dir)
    tar_path = root_dir / "generated.tar"
    write_tar(tar_path, entries)
    with open(tar_path, "rb") as reader:
        Extractor(str(extract_dir), progress=progress).extract(reader)
    return extract_dir


def test_single_file(tmp_path):
    extract_dir = run_extraction(tmp_path, [file_entry("file..ext", b"file data")])
    assert (extract_dir / "file..ext").read_bytes() == b"file data"


def test_single_file_to_new_path(tmp_path):
    tar_path = tmp_path / "one.tar"
    write_tar(tar_path, [file_entry("name", b"content")])
    target = tmp_path / "renamed"
    with open(tar_path, "rb") as reader:
        Extractor(str(target)).extract(reader)
    assert target.read_bytes() == b"content"


def test_single_directory(tmp_path):
    extract_dir = run_extraction(tmp_path, [dir_entry("dir..sfx")])
    assert extract_dir.is_dir()
    assert list(extract_dir.iterdir()) == []


def test_directory_follow_symlink_to_nothing(tmp_path):
    def setup(root):
        target = root / TAR_OUT_ROOT
        os.symlink(target / "foo", target / "child")

    with pytest.raises(FileExistsError):
        run_extraction(tmp_path, [dir_entry("dir"), dir_entry("dir/child")], setup)


def test_directory_follow_symlink_to_file(tmp_path):
    def setup(root):
        target = root / TAR_OUT_ROOT
        (target / "foo").write_bytes(b"original data")
        os.symlink(target / "foo", target / "child")

    with pytest.raises(NotADirectoryError):
        run_extraction(tmp_path, [dir_entry("dir"), dir_entry("dir/child")], setup)


def test_directory_follow_symlink_to_directory(tmp_path):
    def setup(root):
        target = root / TAR_OUT_ROOT
        (target / "foo").mkdir()
        os.symlink(target / "foo", target / "child")

    with pytest.raises(ExtractedDirToSymlinkError):
        run_extraction(tmp_path, [dir_entry("dir"), dir_entry("dir/child")], setup)


def test_single_symlink(tmp_path):
    extract_dir = run_extraction(tmp_path, [symlink_entry("file", "symlink")])
    link = extract_dir / "symlink"
    assert link.is_symlink()
    assert os.readlink(link) == "file"


def test_multiple_roots(tmp_path):
    with pytest.raises(InvalidRootError):
        run_extraction(tmp_path, [dir_entry("root"), dir_entry("sibling")])


def test_multiple_roots_nested(tmp_path):
    with pytest.raises(InvalidRootError):
        run_extraction(tmp_path, [dir_entry("root/child1"), dir_entry("root/child2")])


def test_out_of_order_root(tmp_path):
    with pytest.raises(InvalidRootError):
        run_extraction(tmp_path, [dir_entry("root/child"), dir_entry("root")])


def test_out_of_order(tmp_path):
    with pytest.raises(InvalidRootError):
        run_extraction(
            tmp_path, [dir_entry("root/child/grandchild"), dir_entry("root/child")]
        )


def test_nested_directories(tmp_path):
    extract_dir = run_extraction(
        tmp_path,
        [dir_entry("root"), dir_entry("root/child"), dir_entry("root/child/grandchild")],
    )
    walked = [
        os.path.relpath(dirpath, extract_dir) for dirpath, _, _ in os.walk(extract_dir)
    ]
    assert walked == [".", "child", os.path.join("child", "grandchild")]


def test_root_directory_has_subpath(tmp_path):
    with pytest.raises(InvalidRootError):
        run_extraction(
            tmp_path, [dir_entry("root/child"), dir_entry("root/child/grandchild")]
        )


def test_files_and_folders(tmp_path):
    extract_dir = run_extraction(
        tmp_path,
        [
            dir_entry("root"),
            dir_entry("root/childdir"),
            file_entry("root/childdir/file1", b"some data"),
        ],
    )
    assert (extract_dir / "childdir" / "file1").read_bytes() == b"some data"


def test_internal_symlink_traverse(tmp_path):
    with pytest.raises(TraverseSymlinkError):
        run_extraction(
            tmp_path,
            [
                dir_entry("root"),
                dir_entry("root/child"),
                symlink_entry("child", "root/symlink-dir"),
                file_entry("root/symlink-dir/file", b"file"),
            ],
        )


def test_external_symlink_traverse(tmp_path):
    with pytest.raises(TraverseSymlinkError):
        run_extraction(
            tmp_path,
            [
                dir_entry("inner"),
                symlink_entry("..", "inner/symlink-dir"),
                file_entry("inner/symlink-dir/file", b"overwrite content"),
            ],
        )


def test_last_element_overwrite(tmp_path):
    original = b"original"

    def setup(root):
        (root / "outside-ref").write_bytes(original)

    extract_dir = run_extraction(
        tmp_path,
        [
            dir_entry("root"),
            symlink_entry("../outside-ref", "root/symlink"),
            file_entry("root/symlink", b"overwrite content"),
        ],
        setup,
    )
    assert os.stat(extract_dir / ".." / "outside-ref").st_size == len(original)
    assert not (extract_dir / "symlink").is_symlink()
    assert (extract_dir / "symlink").read_bytes() == b"overwrite content"


def test_single_file_with_extra_entries_rejected(tmp_path):
    with pytest.raises(InvalidRootError, match="root was not a directory"):
        run_extraction(tmp_path, [file_entry("a", b"x"), file_entry("b", b"y")])


def test_invalid_root_name(tmp_path):
    with pytest.raises(InvalidRootError, match="invalid root path"):
        run_extraction(tmp_path, [dir_entry("..")])


def test_unrecognized_root_type(tmp_path):
    with pytest.raises(ExtractError, match="unrecognized tar header type"):
        run_extraction(tmp_path, [("fifo", "pipe", None)])


def test_empty_stream(tmp_path):
    with pytest.raises(ExtractError, match="empty tar file"):
        Extractor(str(tmp_path)).extract(io.BytesIO(b""))


def test_empty_archive(tmp_path):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w"):
        pass
    buffer.seek(0)
    with pytest.raises(ExtractError, match="empty tar file"):
        Extractor(str(tmp_path)).extract(buffer)


def test_null_device_skips_reading():
    stream = io.BytesIO(b"not a tar")
    assert Extractor(os.devnull).extract(stream) is None
    assert stream.tell() == 0


def test_progress_reports_bytes(tmp_path):
    data = b"x" * 10000
    seen = []
    extract_dir = run_extraction(
        tmp_path, [file_entry("big", data)], progress=seen.append
    )
    assert sum(seen) == len(data)
    assert (extract_dir / "big").read_bytes() == data


@pytest.mark.parametrize(
    "path", ["", "/abs", "a//b", "a/./b", "a/../b", "a/", "./a", "../a"]
)
def test_validate_tar_path_rejects(path):
    with pytest.raises(ExtractError):
        validate_tar_path(path)


def test_validate_tar_path_accepts_clean_path():
    assert validate_tar_path("root/child/file..ext") is None
    with pytest.raises(ExtractError, match="path is empty"):
        validate_tar_path("")


def test_get_relative_path():
    assert get_relative_path("root", "root/a/b") == "a/b"
    with pytest.raises(InvalidRootError):
        get_relative_path("root", "rootx/a")
    with pytest.raises(InvalidRootError):
        get_relative_path("root", "root")


def test_copy_with_progress():
    data = bytes(range(256)) * 40
    dst = io.BytesIO()
    sizes = []
    copy_with_progress(dst, io.BytesIO(data), sizes.append)
    assert dst.getvalue() == data
    assert sum(sizes) == len(data)
    assert max(sizes) <= 4096


def test_copy_without_callback():
    dst = io.BytesIO()
    copy_with_progress(dst, io.BytesIO(b"payload"), None)
    assert dst.getvalue() == b"payload"