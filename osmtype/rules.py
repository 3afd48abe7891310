"""
Table-driven tag rules.

A rule binds a tag key and a value pattern to an action::

    Rule('bridge', 'yes', lambda tag: ...)      # exact value
    Rule('layer', '*', ...)                     # any value
    Rule('foot', '!', ...)                      # negative values only
    Rule('lit', '~', ...)                       # anything but negative values

``apply_rules`` scans the element's tags in stored order and, for each tag,
the rules in table order, calling ``action(tag)`` on every match. Actions may
rewrite or clear the tag in place.
"""

from collections import namedtuple
from enum import Enum

from osmtype.constants import (
    RULE_NEGATIVE_VALUES, PATTERN_ANY, PATTERN_NEGATIVE, PATTERN_AFFIRMATIVE
)


class PatternKind(Enum):
    EXACT = 'exact'
    ANY = 'any'
    NEGATIVE = 'negative'
    AFFIRMATIVE = 'affirmative'


_SPECIAL_PATTERNS = {
    PATTERN_ANY: PatternKind.ANY,
    PATTERN_NEGATIVE: PatternKind.NEGATIVE,
    PATTERN_AFFIRMATIVE: PatternKind.AFFIRMATIVE,
}


def is_negative(value):
    return value in RULE_NEGATIVE_VALUES


class ValuePattern(namedtuple('ValuePattern', ['kind', 'literal'])):
    __slots__ = ()

    @classmethod
    def parse(cls, text):
        kind = _SPECIAL_PATTERNS.get(text, PatternKind.EXACT)
        return cls(kind, text if kind is PatternKind.EXACT else None)

    def matches(self, value):
        if self.kind is PatternKind.ANY:
            return True
        if self.kind is PatternKind.NEGATIVE:
            return is_negative(value)
        if self.kind is PatternKind.AFFIRMATIVE:
            return not is_negative(value)
        return value == self.literal


class Rule:
    """Key, value pattern and the action called with the matching tag."""

    __slots__ = ('key', 'pattern', 'action')

    def __init__(self, key, value, action):
        self.key = key
        self.pattern = value if isinstance(value, ValuePattern) else ValuePattern.parse(value)
        self.action = action

    def matches(self, tag):
        return tag.key == self.key and self.pattern.matches(tag.value)

    def __repr__(self):
        return f"Rule({self.key!r}, {self.pattern})"


def apply_rules(element, rules):
    """Run every matching rule action over the element's tags."""
    rules = [r if isinstance(r, Rule) else Rule(*r) for r in rules]
    for tag in element.tags:
        for rule in rules:
            if tag.is_empty():
                # cleared by an earlier action
                break
            # an earlier action may have rewritten the tag
            if rule.matches(tag):
                rule.action(tag)
