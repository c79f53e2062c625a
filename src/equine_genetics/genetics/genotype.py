"""Genotype container for the equine genetics engine."""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)


class Genotype(Mapping):
    """
    Immutable container for a horse's genotype.

    A genotype stores allele pairs by locus name ("E_Extension" -> "E/e") and
    boolean modifiers by name ("sooty" -> True). It is created once at horse
    creation or foal birth and never modified afterwards; phenotype resolution
    only reads it.

    Genotype is a read-only Mapping over both tables, so it compares equal to a
    plain dict holding the same items and can be handed to callers that expect
    plain structured data.
    """

    def __init__(
        self,
        loci: Optional[Dict[str, str]] = None,
        modifiers: Optional[Dict[str, bool]] = None,
    ):
        """
        Construct a genotype.

        Args:
            loci: Mapping of locus names to allele pair strings. If None, empty.
            modifiers: Mapping of boolean modifier names to flags. If None, empty.
        """
        self._loci = dict(loci) if loci is not None else {}
        self._modifiers = dict(modifiers) if modifiers is not None else {}

    # Properties

    @property
    def loci(self) -> Dict[str, str]:
        """Mapping of locus names to allele pairs."""
        return self._loci.copy()

    @property
    def modifiers(self) -> Dict[str, bool]:
        """Mapping of boolean modifier names to flags."""
        return self._modifiers.copy()

    # Mapping protocol

    def __getitem__(self, key: str) -> Any:
        if key in self._loci:
            return self._loci[key]
        return self._modifiers[key]

    def __iter__(self) -> Iterator[str]:
        yield from self._loci
        yield from (name for name in self._modifiers if name not in self._loci)

    def __len__(self) -> int:
        return len(self._loci) + sum(1 for name in self._modifiers if name not in self._loci)

    def __repr__(self) -> str:
        return f"Genotype(loci={self._loci!r}, modifiers={self._modifiers!r})"

    # Construction helpers

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Genotype":
        """
        Build a genotype from a flat mapping as stored by callers.

        Boolean values become modifiers and string values become loci. Any other
        value cannot describe a locus or modifier and is dropped with a warning.

        Args:
            data: Flat mapping such as {"E_Extension": "E/e", "sooty": False}

        Returns:
            New Genotype holding the partitioned entries

        Raises:
            TypeError: If data is not a mapping
        """
        if isinstance(data, Genotype):
            return data
        if not isinstance(data, Mapping):
            raise TypeError(f"Genotype data must be a mapping, got {type(data).__name__}")

        loci = {}
        modifiers = {}
        for name, value in data.items():
            if isinstance(value, bool):
                modifiers[name] = value
            elif isinstance(value, str):
                loci[name] = value
            else:
                logger.warning("Dropping genotype entry %s with unsupported value %r.", name, value)
        return cls(loci=loci, modifiers=modifiers)

    # Serialization methods

    def serialize(self) -> Dict[str, Any]:
        """
        Convert genotype to the flat dict stored by callers.

        Returns:
            Dict with loci first, then modifiers, e.g.
            {"E_Extension": "E/e", "Cr_Cream": "n/n", "sooty": True}
        """
        return dict(self.items())

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "Genotype":
        """Reconstruct a genotype from serialize() output."""
        return cls.from_mapping(data)
