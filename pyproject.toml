[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ipfiles"
version = "0.1.0"
description = "File trees as nodes: in-memory and on-disk directories, multipart and tar encoding, filesystem writing and safe tar extraction"
requires-python = ">=3.10"
dependencies = []
keywords = ["files", "multipart", "tar", "directory", "gitignore", "extraction"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: System :: Archiving",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ipfiles"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
