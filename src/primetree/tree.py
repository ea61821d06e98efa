# src/primetree/tree.py
"""
Tree encoding of a factorization.

Every node has up to three edges:

    set     the exponent of the current factor, itself encoded as a tree
    link    the node holding the next factor at the same level
    offset  how far the prime index advanced, encoded as a tree

A node without edges is a leaf and renders as ``*``. Nodes live in a flat
list owned by the tree and point at each other by position (NodeId); the
root is always position 0.

The encoding is one-way: nothing here turns a tree back into a number.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from primetree.primes import PrimeTable

UNREPRESENTABLE_TRIMMED = "0 and 1 are unrepresentable in trimmed notation"


class NodeId(NamedTuple):
    index: int


@dataclass
class Node:
    set: NodeId | None = None
    link: NodeId | None = None
    offset: NodeId | None = None

    @property
    def is_leaf(self) -> bool:
        return self.set is None and self.link is None and self.offset is None


ROOT = NodeId(0)


class FactorTree:
    """
    Builds and renders the tree for one number at a time.

    trimming_enabled drops exponent-1 leaves wherever the position of the
    factor is already fixed by an offset, a following link or an enclosing
    set edge. The trimmed form cannot represent 0 or 1; the untrimmed form
    cannot represent 0.
    """

    def __init__(self, table: PrimeTable, trimming_enabled: bool = False):
        self.table = table
        self.trimming_enabled = trimming_enabled
        self.nodes: list[Node] = []

    # --- Arena ---------------------------------------------------------------

    def _new_node(self) -> NodeId:
        self.nodes.append(Node())
        return NodeId(len(self.nodes) - 1)

    def node(self, node_id: NodeId) -> Node:
        return self.nodes[node_id.index]

    def clear(self) -> None:
        self.nodes.clear()

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def root(self) -> NodeId | None:
        return ROOT if self.nodes else None

    def __len__(self) -> int:
        return len(self.nodes)

    # --- Build ---------------------------------------------------------------

    def fill_with_num(self, num: int) -> None:
        self.clear()
        if num > (1 if self.trimming_enabled else 0):
            self._inner_fill_with_num(num, True)

    def _inner_fill_with_num(self, num: int, is_parent_set: bool) -> NodeId:
        node_id = self._new_node()

        factors = list(self.table.factorize(num).items())
        last = len(factors) - 1
        current = node_id
        # prime index reached so far at this level
        num_offsets = 0

        # Edges are built in the order set, offset, link.
        for i, (prime_index, exponent) in enumerate(factors):
            node = self.nodes[current.index]

            if exponent > 1:
                node.set = self._inner_fill_with_num(exponent, True)
            elif self.trimming_enabled and (is_parent_set or prime_index > num_offsets or i < last):
                node.set = None
            else:
                node.set = self._new_node()

            if prime_index > num_offsets:
                node.offset = self._inner_fill_with_num(prime_index - num_offsets, False)
                num_offsets += prime_index

            if i < last:
                num_offsets += 1
                node.link = self._new_node()
                current = node.link

        return node_id

    # --- Render --------------------------------------------------------------

    def to_string(self, node_id: NodeId, indent: int = 0) -> str | None:
        """
        Render the subtree at node_id, or None if node_id is not in the tree.

        A non-leaf renders as three lines (s, l, o), each prefixed by two
        spaces per indent level and followed by the rendering of that edge
        one level deeper; a missing edge renders as nothing.
        """
        if not 0 <= node_id.index < len(self.nodes):
            return None
        current = self.nodes[node_id.index]
        if current.is_leaf:
            return "*"

        def edge(child: NodeId | None) -> str:
            if child is None:
                return ""
            return self.to_string(child, indent + 1) or ""

        pad = "  " * indent
        return (
            f"\n{pad}s{edge(current.set)}"
            f"\n{pad}l{edge(current.link)}"
            f"\n{pad}o{edge(current.offset)}"
        )

    def __str__(self) -> str:
        out = self.to_string(ROOT, 0)
        if out is None:
            return UNREPRESENTABLE_TRIMMED if self.trimming_enabled else ""
        return out

    def __repr__(self) -> str:
        return f"FactorTree(nodes={len(self.nodes)}, trimming_enabled={self.trimming_enabled})"
