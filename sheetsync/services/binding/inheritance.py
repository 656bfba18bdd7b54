"""Fill unset binding fields from ancestor containers."""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from sheetsync.core.models import Binding, IndexSpecifier

from .parser import parse

MAX_DEPTH = 256


class NamedNode(Protocol):
    name: str

    @property
    def parent(self) -> Optional["NamedNode"]: ...

    @property
    def is_page_like(self) -> bool: ...


def resolve(
    node: NamedNode,
    parse_fn: Callable[[str], Binding] = parse,
    *,
    max_depth: int = MAX_DEPTH,
) -> Binding:
    """Return the node's binding with worksheet and index inherited.

    The closest ancestor supplying a field wins, and worksheet and index are
    looked up independently. The walk stops at the first page-like ancestor,
    whose own name may still supply a worksheet (``Page 1 // Products``), or
    after ``max_depth`` hops on a malformed parent chain.
    """

    own = parse_fn(node.name)
    worksheet: Optional[str] = own.worksheet
    index: Optional[IndexSpecifier] = own.index

    ancestor = node.parent
    depth = 0
    while ancestor is not None and depth < max_depth:
        if worksheet is not None and index is not None:
            break
        parsed = parse_fn(ancestor.name)
        if ancestor.is_page_like:
            if worksheet is None:
                worksheet = parsed.worksheet
            break
        if worksheet is None:
            worksheet = parsed.worksheet
        if index is None:
            index = parsed.index
        ancestor = ancestor.parent
        depth += 1

    return own.with_inherited(worksheet=worksheet, index=index)


__all__ = ["MAX_DEPTH", "NamedNode", "resolve"]
