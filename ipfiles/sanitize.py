"""Platform checks for paths produced while extracting archives."""

from __future__ import annotations

import ntpath
import os

_WINDOWS = os.name == "nt"

_WINDOWS_RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)
# The forward slash is absent on purpose: it is the standard path separator.
_WINDOWS_RESERVED_CHARS = '[<>:"\\|?*]\x00'


def _posix_is_null_device(path: str) -> bool:
    return path == "/dev/null"


def _posix_validate_platform_path(platform_path: str) -> None:
    if "\x00" in platform_path:
        raise ValueError(
            "invalid platform path: path components cannot contain null: "
            f"{platform_path!r}"
        )


def _posix_validate_path_component(component: str) -> None:
    if component == "..":
        raise ValueError("invalid platform path: path component cannot be '..'")
    if "\x00" in component:
        raise ValueError(
            f"invalid platform path: path components cannot contain null: {component!r}"
        )


def _windows_is_null_device(path: str) -> bool:
    return len(path) == 3 and path.lower() == "nul"


def _windows_validate_path_component(component: str) -> None:
    if component.endswith("."):
        raise ValueError(
            f"invalid platform path: path components cannot end with '.' : {component!r}"
        )
    if component.endswith(" "):
        raise ValueError(
            f"invalid platform path: path components cannot end with ' ' : {component!r}"
        )
    if component == "..":
        raise ValueError("invalid platform path: path component cannot be '..'")
    if any(char in component for char in _WINDOWS_RESERVED_CHARS):
        raise ValueError(
            "invalid platform path: path components cannot contain any of "
            f"{_WINDOWS_RESERVED_CHARS} : {component!r}"
        )
    if component in _WINDOWS_RESERVED_NAMES:
        raise ValueError(
            f"invalid platform path: path component is a reserved name: {component}"
        )


def _windows_validate_platform_path(platform_path: str) -> None:
    _, rest = ntpath.splitdrive(platform_path)
    rest = rest.replace("\\", "/").strip("/")
    for component in rest.split("/"):
        _windows_validate_path_component(component)


def is_null_device(path: str) -> bool:
    """Return True if ``path`` names the platform's null device."""
    if _WINDOWS:
        return _windows_is_null_device(path)
    return _posix_is_null_device(path)


def validate_platform_path(platform_path: str) -> None:
    """Raise ValueError if ``platform_path`` cannot be used on this platform."""
    if _WINDOWS:
        _windows_validate_platform_path(platform_path)
    else:
        _posix_validate_platform_path(platform_path)


def validate_path_component(component: str) -> None:
    """Raise ValueError if ``component`` is not an allowed single path name."""
    if _WINDOWS:
        _windows_validate_path_component(component)
    else:
        _posix_validate_path_component(component)