"""
Classification tree of recognized feature types.

The tree is a static hierarchy of type names (``highway`` > ``primary`` >
``bridge``) loaded once and shared read-only by every classification. Each
node keeps its children in file order, and a node's position among its
siblings is the index packed into type codes (see ``osmtype.type_code``).
"""

import json
from functools import lru_cache
from pathlib import Path

from osmtype import type_code as tc
from osmtype.constants import (
    TYPE_MAX_LEVELS, TYPE_MAX_CHILDREN, EMPTY_TYPE, DEFAULT_CLASSIFICATOR_PATH
)


class ClassifNode:
    """One named node of the classification tree."""

    def __init__(self, name, parent=None, index=0):
        self.name = name
        self.parent = parent
        self.index = index
        self._children = {}
        self._ordered = []

    @property
    def children(self):
        return list(self._ordered)

    def add_child(self, name):
        if name in self._children:
            raise ValueError(f"Duplicate child '{name}' under '{self.name}'")
        if len(self._children) >= TYPE_MAX_CHILDREN:
            raise ValueError(
                f"Node '{self.name}' has more than {TYPE_MAX_CHILDREN} children")
        child = ClassifNode(name, parent=self, index=len(self._children))
        self._children[name] = child
        self._ordered.append(child)
        return child

    def find(self, key):
        """Exact-key lookup of a child, None when absent."""
        return self._children.get(key)

    def __repr__(self):
        return f"ClassifNode({self.name!r}, index={self.index}, children={len(self._children)})"


class Classificator:
    """Read-only classification tree with type-code lookups.

    Parameters
    ----------
    root : ClassifNode
        Fully built tree. It must not be modified once classification starts.
    hidden : iterable of tuple, optional
        Type paths whose subtrees are not drawable when produced by matching.
    """

    def __init__(self, root, hidden=()):
        self.root = root
        self.hidden = tuple(tuple(p) for p in hidden)
        self._validate(root, 0)

    def _validate(self, node, depth):
        if depth > TYPE_MAX_LEVELS:
            raise ValueError(
                f"Classification tree is deeper than {TYPE_MAX_LEVELS} levels at '{node.name}'")
        for child in node.children:
            self._validate(child, depth + 1)

    @classmethod
    def from_dict(cls, tree, hidden=()):
        """Build a tree from a nested mapping.

        Each key maps to a mapping of its children, or to an empty mapping or
        None for a leaf.
        """
        root = ClassifNode('world')

        def build(parent, mapping):
            for name, sub in mapping.items():
                child = parent.add_child(str(name))
                if sub:
                    build(child, sub)

        build(root, tree)
        return cls(root, hidden=[_split_path(p) for p in hidden])

    @classmethod
    def from_json(cls, path):
        """Load a tree from a JSON file.

        The file holds either the nested mapping itself or an object with a
        ``classificator`` mapping and an optional ``hidden`` list of
        dash-joined type paths.
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if 'classificator' in raw:
            return cls.from_dict(raw['classificator'], hidden=raw.get('hidden', ()))
        return cls.from_dict(raw)

    def get_root(self):
        return self.root

    def find_type_by_path(self, path):
        """Return the type code of a path of names, or None if not in the tree."""
        node = self.root
        code = EMPTY_TYPE
        for name in _split_path(path):
            node = node.find(name)
            if node is None:
                return None
            code = tc.push_value(code, node.index)
        return code

    def get_type_by_path(self, path):
        code = self.find_type_by_path(path)
        if code is None:
            raise KeyError(f"Type path not found in classificator: {path!r}")
        return code

    def get_object(self, code):
        """Return the node a type code points to, or None."""
        node = self.root
        for index in tc.unpack(code):
            if index >= len(node._ordered):
                return None
            node = node._ordered[index]
        return node

    def get_path(self, code):
        node = self.get_object(code)
        if node is None:
            raise KeyError(f"Type code {code} is not in the classificator")
        names = []
        while node.parent is not None:
            names.append(node.name)
            node = node.parent
        return tuple(reversed(names))

    def get_readable_name(self, code):
        """Dash-joined path of a type code, e.g. ``highway-primary``."""
        return '-'.join(self.get_path(code))


def _split_path(path):
    if isinstance(path, str):
        return tuple(path.split('-'))
    return tuple(path)


@lru_cache(maxsize=None)
def load_default_classificator():
    """Load the classification tree shipped with the package (once per process)."""
    return Classificator.from_json(DEFAULT_CLASSIFICATOR_PATH)
