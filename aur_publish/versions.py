"""Release version extraction.

The release version is read from the freshly rendered .SRCINFO, so it always
reflects the PKGBUILD as it was just built. Both the .SRCINFO layout
(``\tpkgver = 1.2.3``) and the PKGBUILD layout (``pkgver=1.2.3``) parse.
"""

from __future__ import annotations

from pathlib import Path

from .errors import MalformedManifest

VERSION_KEY = "pkgver"


def extract_version(text: str, key: str = VERSION_KEY) -> str:
    """Return the value of the first ``key = value`` line in text.

    Only the first "=" separates key from value; the value is trimmed of
    surrounding whitespace.

    Examples:
        "pkgname = foo\\n\\tpkgver = 1.2.3" → "1.2.3"
        "pkgver=2024.01.15" → "2024.01.15"

    Raises:
        MalformedManifest: If no line has the key, or its value is empty.
    """
    for line in text.splitlines():
        name, sep, value = line.partition("=")
        if not sep or name.strip() != key:
            continue
        version = value.strip()
        if not version:
            raise MalformedManifest(f"Empty {key} value in line: {line.strip()!r}")
        return version
    raise MalformedManifest(f"No {key} line found")


def read_version(path: Path, key: str = VERSION_KEY) -> str:
    """Read a manifest or .SRCINFO file and extract its version."""
    try:
        text = path.read_text()
    except OSError as exc:
        raise MalformedManifest(f"Cannot read {path}: {exc}") from exc
    try:
        return extract_version(text, key)
    except MalformedManifest as exc:
        raise MalformedManifest(f"{path}: {exc}") from exc
