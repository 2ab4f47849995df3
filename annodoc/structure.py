"""
Data structures describing a help file.

A generation run builds a tree of four node kinds:

- `section` holds string lines describing one aspect of a documented
  subject (determined by section id like '@param', '@return', '@text').
- `block` holds sections describing one subject (function, table, concept).
- `file` holds blocks parsed from one source file.
- `doc` holds files making up the final help file.

String lines may contain embedded line breaks; they are split into
separate output lines only when the tree is collected.
"""

from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union


class NodeKind(Enum):
    """Kinds of structure nodes, from innermost to outermost."""
    SECTION = "section"
    BLOCK = "block"
    FILE = "file"
    DOC = "doc"


Child = Union["Node", str]


class Node:
    """Ordered tree node with parent back-reference.

    Children of a section are string lines; children of other kinds are
    nodes of the next inner kind. `parent_index` of every child node is
    kept equal to its position in `parent.children` after any insertion
    or removal.
    """

    def __init__(self, kind: NodeKind, info: Optional[Dict[str, Any]] = None):
        self.kind = kind
        self.info: Dict[str, Any] = info if info is not None else {}
        self.children: List[Child] = []
        self.parent: Optional["Node"] = None
        self.parent_index: Optional[int] = None

    def __repr__(self) -> str:
        return f"Node({self.kind.value}, info={self.info!r}, children={len(self.children)})"

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator[Child]:
        return iter(self.children)

    def __getitem__(self, index: int) -> Child:
        return self.children[index]

    def __setitem__(self, index: int, value: Child):
        if isinstance(value, Node):
            value.parent = self
        self.children[index] = value
        self._sync_parent_index()

    @property
    def id(self) -> Optional[str]:
        """Section id (`None` for non-section nodes and anonymous sections)."""
        return self.info.get("id")

    @property
    def lines(self) -> List[str]:
        """String children of this node."""
        return [x for x in self.children if isinstance(x, str)]

    def is_kind(self, kind: NodeKind) -> bool:
        return self.kind == kind

    def insert(self, index: int, child: Child):
        """Insert `child` at position `index` (same semantics as `list.insert`)."""
        if isinstance(child, Node):
            child.parent = self
        self.children.insert(index, child)
        self._sync_parent_index()

    def append(self, child: Child):
        """Insert `child` at the end."""
        self.insert(len(self.children), child)

    def remove(self, index: int = -1) -> Child:
        """Remove and return the child at position `index` (last by default)."""
        child = self.children.pop(index)
        if isinstance(child, Node):
            child.parent = None
            child.parent_index = None
        self._sync_parent_index()
        return child

    def has_descendant(self, predicate: Callable[[Child], bool]) -> Tuple[bool, Optional[Child]]:
        """Whether some descendant (node or string line) satisfies `predicate`.

        Returns:
            Tuple of a boolean and the first such descendant in depth-first
            pre-order (or `None`).
        """
        for child in self.children:
            if predicate(child):
                return True, child
            if isinstance(child, Node):
                found, descendant = child.has_descendant(predicate)
                if found:
                    return True, descendant
        return False, None

    def has_lines(self) -> bool:
        """Whether there is any line (even empty one) to be put in output."""
        found, _ = self.has_descendant(lambda x: isinstance(x, str))
        return found

    def clear_lines(self):
        """Remove all lines from the subtree, keeping its node structure."""
        self.children = [x for x in self.children if not isinstance(x, str)]
        for child in self.children:
            child.clear_lines()
        self._sync_parent_index()

    def _sync_parent_index(self):
        for i, child in enumerate(self.children):
            if isinstance(child, Node):
                child.parent_index = i


def as_struct(items: Iterable[Child], kind: NodeKind, info: Optional[Dict[str, Any]] = None) -> Node:
    """Create node of `kind` with `items` appended as children."""
    node = Node(kind, info)
    for item in items:
        node.append(item)
    return node


def is_section(x: Child, section_id: Optional[str] = None) -> bool:
    """Whether `x` is a section node (optionally with a given id)."""
    if not (isinstance(x, Node) and x.kind == NodeKind.SECTION):
        return False
    return section_id is None or x.info.get("id") == section_id


def apply_recursively(func: Callable[[Child], Any], x: Child):
    """Apply `func` to `x` and its descendants in depth-first pre-order.

    Children are visited in their current order, so lines appended to a
    node by `func` are visited as well.
    """
    func(x)
    if isinstance(x, Node):
        for child in x.children:
            apply_recursively(func, child)
