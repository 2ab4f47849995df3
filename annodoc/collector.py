"""Collection of final help file lines."""

from typing import List

from .structure import Node, apply_recursively


def collect_strings(node: Node) -> List[str]:
    """Lines of the structure in depth-first order.

    Lines with embedded line breaks are split into several output lines.
    """
    result: List[str] = []

    def collect(x):
        if isinstance(x, str):
            result.extend(x.split("\n"))

    apply_recursively(collect, node)
    return result
