"""Package manifests and lock files.

- ``models``: ``PackageDescriptor`` and ``Manifest`` data classes.
- ``codec``: JSON ``load``/``save``/``loads``/``dumps``.

The codec functions are also attached to ``Manifest`` as classmethods and
methods so callers can write ``Manifest.read(path)`` and
``manifest.write(path)``.
"""

from deliver.core.manifest.models import HEAD, Manifest, PackageDescriptor
from deliver.core.manifest import codec as _codec

Manifest.from_dict = staticmethod(_codec.from_dict)
Manifest.from_json = staticmethod(_codec.loads)
Manifest.read = staticmethod(_codec.load)
Manifest.to_dict = _codec.to_dict
Manifest.to_json = _codec.dumps


def _write(self: Manifest, path) -> None:
    _codec.save(path, self)


Manifest.write = _write

__all__ = [
    "HEAD",
    "Manifest",
    "PackageDescriptor",
]
