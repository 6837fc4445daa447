"""
Split configuration domain objects for gitsplit.

A split configuration says which subtrees of the source repository are
extracted (prefixes) and where the extracted history is published (targets).
"""

from dataclasses import dataclass
from typing import Dict, Any, Iterable, Optional, Tuple


@dataclass(frozen=True)
class Prefix:
    """
    One path-prefix rewrite rule, written ``from[:to]``.

    ``lib/:`` keeps lib/ and moves it to the root of the extracted tree,
    ``lib/`` alone does the same, ``lib/:src/`` moves it under src/.
    """
    source: str
    destination: str = ""

    @classmethod
    def parse(cls, text: str) -> 'Prefix':
        source, _, destination = text.partition(':')
        return cls(source=source, destination=destination)

    def __str__(self) -> str:
        return f"{self.source}:{self.destination}"


@dataclass(frozen=True)
class SplitConfiguration:
    """
    One extraction rule: ordered prefixes plus the targets to publish to.

    Both sequences are tuples; shape normalisation (single string versus list)
    happens once when the configuration file is read.
    """
    prefixes: Tuple[str, ...]
    targets: Tuple[str, ...] = ()

    @classmethod
    def create(cls, prefixes: Iterable[str], targets: Optional[Iterable[str]] = None) -> 'SplitConfiguration':
        return cls(prefixes=tuple(prefixes), targets=tuple(targets or ()))

    @property
    def parsed_prefixes(self) -> Tuple[Prefix, ...]:
        return tuple(Prefix.parse(p) for p in self.prefixes)

    @property
    def label(self) -> str:
        """Prefixes joined for log messages."""
        return ', '.join(self.prefixes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'prefixes': list(self.prefixes),
            'targets': list(self.targets),
        }
