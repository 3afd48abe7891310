"""
Greedy matching of element tags against the classification tree.

Each round starts at the tree root with the first unconsumed tag whose key
is a root child, then keeps descending: first by a tag value naming a child
of the current node, otherwise by a tag key naming one (so that
``highway=pedestrian`` + ``area=yes`` gives ``highway-pedestrian-area``).
The finished path is packed into a type code. Rounds repeat until no tag can
start a new path. A tag consumed by a path is never used again, even when the
resulting type is dropped as not drawable.
"""

import logging

from osmtype import type_code as tc
from osmtype.constants import EMPTY_TYPE
from osmtype.tags import for_each_tag_ex, need_match_value

logger = logging.getLogger(__name__)


class _PathBuilder:
    """Current node and path of one matching round."""

    def __init__(self, root):
        self.root = root
        self.path = []

    @property
    def current(self):
        return self.path[-1] if self.path else self.root

    def match_key(self, tag):
        # first try to match the key, then the corresponding value
        node = self.current.find(tag.key)
        if node is None:
            return False
        self.path.append(node)
        if need_match_value(tag.key, tag.value):
            value_node = node.find(tag.value)
            if value_node is not None:
                self.path.append(value_node)
        return True

    def match_value(self, tag):
        if not need_match_value(tag.key, tag.value):
            return None
        return self.current.find(tag.value)


def pack_nodes(path):
    code = EMPTY_TYPE
    for node in path:
        code = tc.push_value(code, node.index)
    return code


def match_types(element, params, classificator, is_drawable, skip=None):
    """Add the drawable types matched from ``element`` tags to ``params``.

    Parameters
    ----------
    element : OsmElement
    params : FeatureParams
    classificator : Classificator
    is_drawable : callable
        ``is_drawable(code) -> bool``; types it rejects are dropped.
    skip : set of int, optional
        Tag positions already consumed. Updated in place.

    Returns
    -------
    set of int
        Positions of the tags consumed by matched paths.
    """
    if skip is None:
        skip = set()
    consumed_before = set(skip)
    root = classificator.get_root()

    while True:
        builder = _PathBuilder(root)

        # find the first root object by key
        if not for_each_tag_ex(element, skip, builder.match_key):
            break
        if not builder.path:
            raise RuntimeError("Matched a root tag but the type path is empty")

        while True:
            # next objects are searched by value first
            node = for_each_tag_ex(element, skip, builder.match_value)
            if node is not None:
                builder.path.append(node)
            elif not for_each_tag_ex(element, skip, builder.match_key):
                break

        code = pack_nodes(builder.path)
        if is_drawable(code):
            params.add_type(code)
        else:
            logger.debug("Dropped non drawable type %s", '-'.join(n.name for n in builder.path))

    return {pos for pos in skip - consumed_before if 'name' not in element.tags[pos].key}
