"""
ABI field type grammar.

A raw field type is a base type name decorated with any combination of four
markers:

    []   list
    ?    optional
    $    binary extension
    @    variant member

``parse("asset[]?")`` -> ParsedType(base_type="asset", is_list=True, is_optional=True, ...)

``$`` and ``@`` may appear anywhere. ``?`` binds to what precedes it: after
``[]`` it makes the list optional, before ``[]`` it makes each element
optional (``"name?[]"`` is a list of optional names).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from .errors import MalformedTypeString

__all__ = ["ParsedType", "parse", "apply_alias", "format_type"]

_LIST = "[]"
_MARKER_RE = re.compile(r"[?$@]")


@dataclass(frozen=True)
class ParsedType:
    base_type: str
    is_list: bool = False
    is_optional: bool = False
    is_extension: bool = False
    is_variant_member: bool = False
    is_element_optional: bool = False

    def __str__(self) -> str:
        return format_type(self)


def parse(raw: Any) -> ParsedType:
    if not isinstance(raw, str):
        raise MalformedTypeString("type must be a string", type=repr(raw))
    return _parse(raw)


@lru_cache(maxsize=4096)
def _parse(raw: str) -> ParsedType:
    list_at = raw.find(_LIST)
    if raw.count(_LIST) > 1:
        raise MalformedTypeString("nested lists are not supported", type=raw)
    base = raw.replace(_LIST, "")
    if "[" in base or "]" in base:
        # Fixed-size arrays ("int8[4]") have no layout in this grammar.
        raise MalformedTypeString("unbalanced or sized brackets", type=raw)
    base = _MARKER_RE.sub("", base).strip()
    if not base:
        raise MalformedTypeString("type has no base name", type=raw)
    if re.search(r"\s", base):
        raise MalformedTypeString("type name contains whitespace", type=raw)
    if list_at < 0:
        is_optional, is_element_optional = "?" in raw, False
    else:
        is_optional, is_element_optional = "?" in raw[list_at:], "?" in raw[:list_at]
    return ParsedType(
        base_type=base,
        is_list=list_at >= 0,
        is_optional=is_optional,
        is_extension="$" in raw,
        is_variant_member="@" in raw,
        is_element_optional=is_element_optional,
    )


def apply_alias(use: ParsedType, target: ParsedType) -> ParsedType:
    """
    Substitute an alias's target into a use site, merging the markers.

    ``names`` -> ``name[]`` used as ``names?`` gives ``name[]?``. An optional
    alias used as a list makes the elements optional: ``mname`` -> ``name?``
    used as ``mname[]`` gives ``name?[]``. A list alias used as a list again
    would need nested lists, which the wire format does not have.
    """
    if use.is_list and target.is_list:
        raise MalformedTypeString(
            "nested list through type alias", type=format_type(use), target=format_type(target)
        )
    if target.is_list:
        element_optional = target.is_element_optional
        optional = use.is_optional or target.is_optional
    elif use.is_list:
        element_optional = use.is_element_optional or target.is_optional
        optional = use.is_optional
    else:
        element_optional = False
        optional = use.is_optional or target.is_optional
    return ParsedType(
        base_type=target.base_type,
        is_list=use.is_list or target.is_list,
        is_optional=optional,
        is_extension=use.is_extension or target.is_extension,
        is_variant_member=use.is_variant_member or target.is_variant_member,
        is_element_optional=element_optional,
    )


def format_type(t: ParsedType) -> str:
    """Canonical spelling: ``base?[]?$@`` with only the markers that are set."""
    return (
        t.base_type
        + ("?" if t.is_element_optional else "")
        + (_LIST if t.is_list else "")
        + ("?" if t.is_optional else "")
        + ("$" if t.is_extension else "")
        + ("@" if t.is_variant_member else "")
    )
