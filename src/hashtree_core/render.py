from __future__ import annotations
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree as RichTree

from .tree import Node, Tree


def _label(node: Node, markup: bool) -> str:
    h = node.digest.hex()
    if node.is_leaf:
        return f"[cyan]{h}[/cyan] ({escape(str(node.leaf))})" if markup else f"{h} ({node.leaf})"
    return f"[bold]{h}[/bold]" if markup else h


def render_tree(tree: Tree) -> RichTree:
    """Rich renderable of the whole tree, leaves annotated with their values."""
    out = RichTree(_label(tree.root, True))
    stack = [(tree.root, out)]
    while stack:
        node, branch = stack.pop()
        if node.is_interior:
            for child in (node.left, node.right):
                sub = branch.add(_label(child, True))
                stack.append((child, sub))
    return out


def print_tree(tree: Tree, console: Optional[Console] = None) -> None:
    (console or Console()).print(render_tree(tree))


def format_tree(tree: Tree) -> str:
    """Plain indented dump, one `- <hex>` line per node."""
    lines: List[str] = []

    def walk(node: Node, indent: int) -> None:
        suffix = ":" if node.is_interior else ""
        lines.append("  " * indent + "- " + _label(node, False) + suffix)
        if node.is_interior:
            walk(node.left, indent + 1)
            walk(node.right, indent + 1)

    walk(tree.root, 0)
    return "\n".join(lines)
