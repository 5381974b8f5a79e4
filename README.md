# ipfiles

A small library for working with trees of files as nodes. A node is a
regular file (`ipfiles.node.File`), a directory (`ipfiles.node.Directory`)
or a symlink (`ipfiles.linkfile.Symlink`). Every node has `close()` and
`size()`. Files also have `read()` and `seek()`. A directory yields
entries with `.name` and `.node` from `entries()`.

## What it offers

- `ipfiles.readerfile`: `new_bytes_file`, `new_reader_file`,
  `new_reader_stat_file` and `new_reader_path_file` build a `ReaderFile`
  from bytes or a binary stream.
- `ipfiles.slicedirectory`: `new_map_directory` (entries sorted by name)
  and `new_slice_directory` (entries in the given order) build in-memory
  directories. Each entry is a `FileEntry`.
- `ipfiles.node`: the helpers `to_file`, `to_dir`, `file_from_entry` and
  `dir_from_entry`, and the errors `FilesError`, `NotDirectoryError`,
  `NotReaderError` and `NotSupportedError`.
- `ipfiles.walk.walk(node)`: yields `(path, node)` pairs depth-first,
  parents before their children. The root has the path `''`.
- `ipfiles.serialfile`: `new_serial_file(path, include_hidden)` and
  `new_serial_file_with_filter(path, filter)` open a path on disk as a
  file, symlink or `SerialDirectory`. Children are opened only as you
  iterate. `SerialDirectory.size()` adds up the sizes of the regular files
  that the filter does not leave out.
- `ipfiles.filter`: `new_filter(ignore_file, rules, include_hidden)` builds
  a `Filter` from `.gitignore`-style lines. `Filter.should_exclude(path)`
  checks a path against them. `ipfiles.hidden.is_hidden` treats dot-files
  as hidden, and on Windows also files with the hidden attribute.
- `ipfiles.filewriter.write_to(node, path)`: writes a tree to disk. It
  raises `PathExistsError` if the target exists and
  `InvalidDirectoryEntryError` for names such as `""`, `"."`, `".."` or
  names that contain a separator. On Windows, reserved names and
  characters are refused as well (`is_valid_filename`).
- `ipfiles.tarwriter.TarWriter`: writes a tree as a tar stream.
  `write_file(node, fpath)` adds a node. It raises `PathOutsideRootError`
  for an entry whose path escapes the root; `validate_tar_file_path` makes
  that check on its own.
- `ipfiles.multifilereader.MultiFileReader`: encodes a directory as a
  multipart body. Set `form=True` for `form-data` dispositions. The
  separator is available from `boundary()`.
- `ipfiles.multipartfile`: `MultipartReader` splits a multipart stream.
  `new_file_from_part_reader` turns it back into a `MultipartDirectory`
  that is read as you iterate. Directories named only by a path prefix
  appear too.
- `ipfiles.webfile.WebFile(url)`: a file fetched with a GET request on its
  first `read()` or `size()`. `size()` gives the `Content-Length`.
- `ipfiles.extractor.Extractor(path, progress=None)`: `extract(stream)`
  unpacks a tar archive holding either a single file or symlink, or one
  root directory with everything else beneath it. It raises
  `InvalidRootError`, `TraverseSymlinkError`,
  `ExtractedDirToSymlinkError` or `ExtractError`, and refuses paths that
  leave the root. Extracting to the null device does nothing.
  `ipfiles.sanitize` holds the per-platform path checks.
- `ipfiles.jsonenc.marshal_json_bytes(value)`: compact UTF-8 JSON that
  leaves `<`, `>` and `&` unescaped.

## Installation

```
pip install ipfiles
```

To run the tests:

```
pip install "ipfiles[test]"
pytest
```

## Example

```python
import io

from ipfiles.extractor import Extractor
from ipfiles.filewriter import write_to
from ipfiles.multifilereader import MultiFileReader
from ipfiles.multipartfile import (
    MULTIPART_FORMDATA_TYPE,
    MultipartReader,
    new_file_from_part_reader,
)
from ipfiles.readerfile import new_bytes_file
from ipfiles.slicedirectory import new_map_directory
from ipfiles.tarwriter import TarWriter
from ipfiles.walk import walk

tree = new_map_directory({
    "hello.txt": new_bytes_file(b"hello"),
    "sub": new_map_directory({"a.txt": new_bytes_file(b"bleep")}),
})
for path, node in walk(tree):
    print(repr(path), type(node).__name__)

# Round trip through multipart encoding.
mfr = MultiFileReader(tree, form=True)
decoded = new_file_from_part_reader(
    MultipartReader(mfr, mfr.boundary()), MULTIPART_FORMDATA_TYPE
)
print([entry.name for entry in decoded.entries()])

# Write to disk; raises PathExistsError if the target exists.
write_to(new_map_directory({"x.txt": new_bytes_file(b"x")}), "/tmp/output")

# Tar it up and extract it again.
buf = io.BytesIO()
with TarWriter(buf) as writer:
    writer.write_file(new_map_directory({"hello.txt": new_bytes_file(b"hello")}), "root")
buf.seek(0)
Extractor(path="/tmp/extracted").extract(buf)
```

## What it does not do

This is a library only. It has no command-line tool, no HTTP server and no
content-routing client. It also has no helper for running work in
concurrent batches.