"""
Repository locations as written in the configuration file.

Three shapes are accepted:

- ``scheme://rest`` (https, ssh, file, ...)
- scp-like ``user@host:path`` (no scheme)
- a plain filesystem path, treated as ``file``
"""

from dataclasses import dataclass

from .utils import expand_env, resolve_path


@dataclass(frozen=True)
class GitUri:
    scheme: str
    location: str

    @classmethod
    def parse(cls, uri: str) -> 'GitUri':
        scheme, sep, rest = uri.partition("://")
        if sep:
            return cls(scheme=scheme, location=rest)

        first_segment = uri.split("/", 1)[0]
        if first_segment.find(":") > 0:
            return cls(scheme="", location=uri)

        return cls(scheme="file", location=uri)

    @property
    def is_local(self) -> bool:
        return self.scheme == "file"

    @property
    def schemeless_uri(self) -> str:
        """Location without scheme; local paths are made absolute."""
        if self.is_local:
            return resolve_path(self.location)
        return expand_env(self.location)

    @property
    def uri(self) -> str:
        if not self.scheme:
            return self.schemeless_uri
        return f"{self.scheme}://{self.schemeless_uri}"

    def __str__(self) -> str:
        return self.uri
