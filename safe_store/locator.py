"""File locators: parsing and deriving ``file:///root/path`` strings.

A locator names a file or directory on the device as
``scheme "://" "/" root "/" segments``. A trailing ``/`` marks a
directory. Nothing in this module touches the filesystem.
"""

from dataclasses import dataclass

from .errors import InvalidLocatorError

SCHEME = "file"
SCHEME_SEPARATOR = "://"
PATH_SEPARATOR = "/"

TMP_SUFFIX = ".tmp"
ENCRYPTION_SUFFIX = ".rem"

SDCARD_ROOT = "file:///SDCard/"
DEVICE_MEMORY_ROOT = "file:///store/"

_RESERVED_SEGMENTS = {"", ".", ".."}


@dataclass(frozen=True)
class Locator:
    """An immutable, validated file locator."""

    root: str
    segments: tuple[str, ...] = ()
    is_directory: bool = True

    def __str__(self) -> str:
        return self.url

    @property
    def url(self) -> str:
        parts = (self.root,) + self.segments
        url = f"{SCHEME}{SCHEME_SEPARATOR}{PATH_SEPARATOR}{PATH_SEPARATOR.join(parts)}"
        return url + PATH_SEPARATOR if self.is_directory else url

    @property
    def name(self) -> str:
        """Leaf name without any trailing separator (the root name for roots)."""
        return self.segments[-1] if self.segments else self.root

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def parent(self) -> "Locator | None":
        if self.is_root:
            return None
        return Locator(self.root, self.segments[:-1], is_directory=True)

    def child(self, name: str, directory: bool = False) -> "Locator":
        _check_segment(name, self.url)
        return Locator(self.root, self.segments + (name,), is_directory=directory)

    def with_name(self, name: str) -> "Locator":
        if self.is_root:
            raise InvalidLocatorError(f"Cannot rename a root: {self.url}", locator=self.url)
        _check_segment(name, self.url)
        return Locator(self.root, self.segments[:-1] + (name,), is_directory=self.is_directory)

    def as_directory(self) -> "Locator":
        if self.is_directory:
            return self
        return Locator(self.root, self.segments, is_directory=True)

    def temp_sibling(self, suffix: str = TMP_SUFFIX) -> "Locator":
        """Reserved-name twin used to stage new content for this file."""
        if self.is_root or self.is_directory:
            raise InvalidLocatorError(
                f"Only files have a temp sibling: {self.url}", locator=self.url
            )
        return Locator(self.root, self.segments[:-1] + (self.name + suffix,), is_directory=False)


def _check_segment(segment: str, url: str) -> None:
    if segment in _RESERVED_SEGMENTS or PATH_SEPARATOR in segment:
        raise InvalidLocatorError(
            f"Invalid path segment {segment!r} in {url}", locator=url
        )


def parse(url: "str | Locator") -> Locator:
    """Parse a locator string.

    Raises:
        InvalidLocatorError: If the scheme separator is absent, the scheme
            is not ``file``, the path is not absolute, or a segment is
            empty, ``.`` or ``..``.
    """
    if isinstance(url, Locator):
        return url
    if not isinstance(url, str) or SCHEME_SEPARATOR not in url:
        raise InvalidLocatorError(f"Missing '{SCHEME_SEPARATOR}' in locator: {url!r}", locator=url)

    scheme, _, path = url.partition(SCHEME_SEPARATOR)
    if scheme != SCHEME:
        raise InvalidLocatorError(f"Unsupported scheme {scheme!r} in {url}", locator=url)
    if not path.startswith(PATH_SEPARATOR):
        raise InvalidLocatorError(f"Locator path must be absolute: {url}", locator=url)

    is_directory = path.endswith(PATH_SEPARATOR)
    body = path[1:-1] if is_directory else path[1:]
    if not body:
        raise InvalidLocatorError(f"Locator has no root: {url}", locator=url)

    parts = body.split(PATH_SEPARATOR)
    for part in parts:
        _check_segment(part, url)

    # A bare root is always a directory
    return Locator(parts[0], tuple(parts[1:]), is_directory=is_directory or len(parts) == 1)


def join(root: "str | Locator", *segments: str) -> Locator:
    """Concatenate a root locator and path segments into one locator.

    Separators between pieces are normalized to a single ``/``; a trailing
    ``/`` on the last segment keeps the result in directory form.
    """
    base = str(root).rstrip(PATH_SEPARATOR)
    pieces = [s.strip(PATH_SEPARATOR) for s in segments if s.strip(PATH_SEPARATOR)]
    url = PATH_SEPARATOR.join([base] + pieces)
    if not pieces or segments[-1].endswith(PATH_SEPARATOR):
        url += PATH_SEPARATOR
    return parse(url)


def ancestors_of(locator: "str | Locator") -> list[Locator]:
    """Every directory-level prefix of ``locator``, root first.

    Directory locators include themselves; file locators stop at the parent.

    >>> [str(a) for a in ancestors_of("file:///SDCard/a/b/")]
    ['file:///SDCard/', 'file:///SDCard/a/', 'file:///SDCard/a/b/']
    """
    loc = parse(locator)
    depth = len(loc.segments) if loc.is_directory else len(loc.segments) - 1
    return [Locator(loc.root, loc.segments[:i], is_directory=True) for i in range(depth + 1)]


def strip_encryption_suffix(name: str | None, suffix: str = ENCRYPTION_SUFFIX) -> str | None:
    """Remove the platform encryption marker from a file name, if present."""
    if name is None or not suffix or not name.endswith(suffix):
        return name
    return name[: -len(suffix)]
