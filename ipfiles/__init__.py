"""File trees as nodes: in-memory and on-disk directories, walking, filtering, multipart and tar encoding, writing to disk and safe tar extraction."""

__version__ = "0.1.0"