"""Slash-delimited path helpers shared by every store implementation."""

from .errors import InvalidArgumentError

ROOT_PATH = "/"


def split_path(path: str | None) -> list[str]:
    """Split a path into its non-empty segments.

    Leading, trailing and repeated slashes collapse, so ``"A//B/"`` and
    ``"/A/B"`` both yield ``["A", "B"]``. An empty path is the root.
    """
    if not path:
        return []
    return [part for part in path.split("/") if part]


def normalize_path(path: str | None) -> str:
    """Canonical absolute form: ``/A/B`` or ``/`` for the root."""
    return ROOT_PATH + "/".join(split_path(path))


def join_path(parent_path: str, name: str) -> str:
    """Child path of ``name`` under ``parent_path``, collapsing at the root."""
    if parent_path in ("", ROOT_PATH):
        return f"/{name}"
    return f"{parent_path}/{name}"


def split_file_path(path: str) -> tuple[list[str], str]:
    """Split a file path into (folder segments, file name).

    Raises:
        InvalidArgumentError: If the path has no trailing file name
    """
    segments = split_path(path)
    if not segments or path.rstrip().endswith("/"):
        raise InvalidArgumentError("Missing filename in path")
    return segments[:-1], segments[-1]


def validate_name(name: str | None) -> str:
    """Check a single path segment used as an item name.

    Raises:
        InvalidArgumentError: If the name is empty or contains a slash
    """
    if name is None or not name.strip():
        raise InvalidArgumentError("Name must not be empty")
    if "/" in name:
        raise InvalidArgumentError(f"Name must not contain '/': {name}")
    return name


def is_under(path: str, ancestor: str) -> bool:
    """Whether ``path`` lies strictly below ``ancestor`` (by path prefix)."""
    ancestor = normalize_path(ancestor)
    path = normalize_path(path)
    if ancestor == ROOT_PATH:
        return path != ROOT_PATH
    return path.startswith(ancestor + "/")
