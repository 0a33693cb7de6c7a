"""
Resolved struct schema.

The resolver's output and the codec's only input. Everything here is
immutable: fields are frozen dataclasses, field lists are tuples and the
index itself is a read-only mapping, so one schema can be shared by any
number of concurrent encode/decode calls.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple

from .grammar import ParsedType, apply_alias, parse

__all__ = ["ResolvedField", "ResolvedStructSchema"]


@dataclass(frozen=True)
class ResolvedField:
    name: str
    base_type: str
    is_object: bool = False
    is_list: bool = False
    is_optional: bool = False
    is_extension: bool = False
    is_variant_member: bool = False
    is_element_optional: bool = False

    @property
    def nullable(self) -> bool:
        """Whether a query layer should expose this field as nullable."""
        return self.is_optional or self.is_extension

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ResolvedStructSchema(Mapping[str, Tuple[ResolvedField, ...]]):
    """
    Read-only mapping of struct name -> ordered fields.

    Variant-backed entries are listed in ``variants``; their fields are the
    member slots in tag order. Aliases of primitives (or of types carrying
    markers, e.g. ``name[]``) are kept in ``type_aliases`` fully expanded;
    aliases of bare struct or variant names are ordinary entries.
    """

    __slots__ = ("_structs", "_variants", "_aliases")

    def __init__(
        self,
        structs: Mapping[str, Tuple[ResolvedField, ...]],
        variants: FrozenSet[str] = frozenset(),
        type_aliases: Optional[Mapping[str, ParsedType]] = None,
    ) -> None:
        self._structs = MappingProxyType({k: tuple(v) for k, v in structs.items()})
        self._variants = frozenset(variants)
        self._aliases = MappingProxyType(dict(type_aliases or {}))

    def __getitem__(self, name: str) -> Tuple[ResolvedField, ...]:
        return self._structs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._structs)

    def __len__(self) -> int:
        return len(self._structs)

    def __repr__(self) -> str:
        return f"ResolvedStructSchema(structs={len(self._structs)}, variants={len(self._variants)})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResolvedStructSchema):
            return (
                dict(self._structs) == dict(other._structs)
                and self._variants == other._variants
                and dict(self._aliases) == dict(other._aliases)
            )
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    @property
    def variants(self) -> FrozenSet[str]:
        return self._variants

    @property
    def type_aliases(self) -> Mapping[str, ParsedType]:
        return self._aliases

    def expand(self, raw: Any) -> ParsedType:
        """Parse a type string and substitute a primitive-level alias, if any."""
        t = raw if isinstance(raw, ParsedType) else parse(raw)
        target = self._aliases.get(t.base_type)
        return apply_alias(t, target) if target is not None else t

    def is_variant(self, name: str) -> bool:
        return name in self._variants

    def variant_members(self, name: str) -> Tuple[str, ...]:
        return tuple(f.name for f in self._structs[name])

    def fields(self, name: str) -> Tuple[ResolvedField, ...]:
        return self._structs[name]

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Plain JSON-compatible view for tooling and snapshots."""
        return {name: [f.as_dict() for f in fields] for name, fields in self._structs.items()}
