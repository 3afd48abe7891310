"""
Tag store of a map element and the filter deciding which tags are
interpreted at all.
"""

import re

from osmtype.constants import (
    ELEMENT_KINDS, IGNORED_KEYS, ALWAYS_PROCESSED_KEYS, FILTER_NEGATIVE_VALUES,
    NUMERIC_VALUE_KEYS
)

_NUMBER_RE = re.compile(r"^\s*[+-]?[0-9]+$")


class Tag:
    """Mutable key/value pair. A cleared tag has empty key and value."""

    __slots__ = ('key', 'value')

    def __init__(self, key, value):
        self.key = key
        self.value = value

    def clear(self):
        self.key = ''
        self.value = ''

    def is_empty(self):
        return not self.key and not self.value

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return (self.key, self.value) == (other.key, other.value)

    def __repr__(self):
        return f"Tag({self.key!r}, {self.value!r})"


class OsmElement:
    """An input map object: an ordered tag sequence plus its geometry kind."""

    def __init__(self, tags=(), kind='point', osm_id=None):
        if kind not in ELEMENT_KINDS:
            raise ValueError(f"Element kind must be one of {ELEMENT_KINDS}, got {kind!r}")
        self.tags = [t if isinstance(t, Tag) else Tag(*t) for t in tags]
        self.kind = kind
        self.osm_id = osm_id

    @classmethod
    def from_dict(cls, tags, kind='point', osm_id=None):
        return cls([Tag(str(k), str(v)) for k, v in tags.items()], kind=kind, osm_id=osm_id)

    def add_tag(self, key, value):
        self.tags.append(Tag(key, value))

    def has_tag(self, key):
        return any(t.key == key for t in self.tags)

    def get_tag(self, key, default=None):
        for t in self.tags:
            if t.key == key:
                return t.value
        return default

    def to_dict(self):
        """Non-empty tags as a dict (first value per key wins)."""
        result = {}
        for t in self.tags:
            if t.key and t.key not in result:
                result[t.key] = t.value
        return result

    def __repr__(self):
        return f"OsmElement(kind={self.kind!r}, osm_id={self.osm_id!r}, tags={self.tags!r})"


def is_number(value):
    return bool(_NUMBER_RE.match(value))


def need_match_value(key, value):
    # Take numbers only for "capital" and "admin_level".
    return not is_number(value) or key in NUMERIC_VALUE_KEYS


def ignore_tag(key, value):
    if not key:
        return True
    if key in IGNORED_KEYS:
        return True
    if key in ALWAYS_PROCESSED_KEYS:
        return False
    return value in FILTER_NEGATIVE_VALUES


def admit(key, value):
    """Whether a tag is eligible for interpretation."""
    return not ignore_tag(key, value)


def for_each_tag(element, to_do):
    """Call ``to_do(tag)`` on admitted tags until it returns something truthy.

    The filter is evaluated at each visit since earlier stages may have
    rewritten or cleared tags.
    """
    for tag in element.tags:
        if ignore_tag(tag.key, tag.value):
            continue
        res = to_do(tag)
        if res:
            return res
    return None


def for_each_tag_ex(element, skip, to_do):
    """Like ``for_each_tag`` but over tags not yet consumed.

    ``skip`` is the set of consumed tag positions. Name tags are added to it
    unvisited; the tag for which ``to_do`` returns something truthy is added
    to it as well.
    """
    for pos, tag in enumerate(element.tags):
        if pos in skip or ignore_tag(tag.key, tag.value):
            continue
        if 'name' in tag.key:
            skip.add(pos)
            continue
        res = to_do(tag)
        if res:
            skip.add(pos)
            return res
    return None
