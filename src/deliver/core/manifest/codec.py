"""JSON codec for manifest and lock documents.

Document shape::

    {
      "repository": "github.com/acme/app",
      "packages": {
        "log": {"source": "https://github.com/acme/log.git",
                "branch": "main", "revision": "4f2c..."}
      }
    }

Keys are matched case-insensitively when reading, so documents written
with capitalised keys (``Packages``, ``Source``) load unchanged. Writing is
deterministic: lowercase keys, sorted, two-space indent, and empty
``branch``/``repository`` values omitted. Two manifests with the same
content always serialize to byte-identical text.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from deliver.core.manifest.models import Manifest, PackageDescriptor
from deliver.exceptions import ManifestParseError


def _lower_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {str(k).lower(): v for k, v in data.items()}


def _optional_str(entry: dict[str, Any], key: str, where: str) -> str:
    value = entry.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ManifestParseError(
            f"{where}: {key!r} must be a string, got {type(value).__name__}"
        )
    return value


def _descriptor_from_dict(name: str, entry: Any) -> PackageDescriptor:
    where = f"package {name!r}"
    if not isinstance(entry, dict):
        raise ManifestParseError(f"{where}: entry must be an object")
    entry = _lower_keys(entry)
    source = _optional_str(entry, "source", where)
    if not source:
        raise ManifestParseError(f"{where}: missing 'source'")
    return PackageDescriptor(
        name=name,
        source=source,
        branch=_optional_str(entry, "branch", where),
        revision=_optional_str(entry, "revision", where),
    )


def from_dict(data: Any) -> Manifest:
    """Build a ``Manifest`` from a decoded JSON value.

    Raises:
        ManifestParseError: If the value does not have the manifest shape.
    """
    if not isinstance(data, dict):
        raise ManifestParseError("Manifest must be a JSON object")
    data = _lower_keys(data)

    repository = _optional_str(data, "repository", "manifest")
    packages_data = data.get("packages")
    if packages_data is None:
        packages_data = {}
    elif not isinstance(packages_data, dict):
        raise ManifestParseError("Manifest 'packages' must be an object")

    manifest = Manifest(repository=repository)
    for name, entry in packages_data.items():
        manifest.set(_descriptor_from_dict(str(name), entry))
    return manifest


def to_dict(manifest: Manifest) -> dict[str, Any]:
    """Serialize a ``Manifest`` to plain JSON-ready data."""
    packages: dict[str, Any] = {}
    for pkg in manifest.sorted_packages():
        entry: dict[str, Any] = {"source": pkg.source, "revision": pkg.revision}
        if pkg.branch:
            entry["branch"] = pkg.branch
        packages[pkg.name] = entry

    data: dict[str, Any] = {"packages": packages}
    if manifest.repository:
        data["repository"] = manifest.repository
    return data


def loads(text: str) -> Manifest:
    """Decode a manifest from JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(f"Invalid JSON: {exc}") from exc
    return from_dict(data)


def dumps(manifest: Manifest, indent: int = 2) -> str:
    """Encode a manifest as deterministic JSON text."""
    return json.dumps(to_dict(manifest), indent=indent, sort_keys=True) + "\n"


def load(path: Path) -> Manifest:
    """Read a manifest from disk.

    Raises:
        FileNotFoundError: If the file does not exist.
        ManifestParseError: If the file is not a valid manifest. The
            message names the offending file.
    """
    text = path.read_text(encoding="utf-8")
    try:
        return loads(text)
    except ManifestParseError as exc:
        raise ManifestParseError(f"{path}: {exc}") from exc


def save(path: Path, manifest: Manifest) -> None:
    """Write a manifest to disk, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(manifest), encoding="utf-8")
