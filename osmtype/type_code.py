"""
Packing of classification tree paths into integer type codes.

A type code stores one root-to-node path, root excluded. Bit layout, least
significant bits first::

    | index level 1 | index level 2 | ... | index level N | 1 | 0 ... |
      7 bits          7 bits                7 bits          7 bits

Every level stores the sibling index (0-127) of its node, and a control
field holding 1 follows the last level, so the depth of a code is recoverable
and index 0 is a valid value. The empty code (depth 0) is ``1``. At most 8
levels fit in 63 bits.

Truncating a code to N levels gives the code of its ancestor at depth N, so
``trunc_value(code, n) == ancestor`` is an "is-a" check.
"""

from osmtype.constants import (
    TYPE_FIELD_BITS, TYPE_FIELD_MASK, TYPE_MAX_LEVELS, TYPE_MAX_CHILDREN,
    EMPTY_TYPE
)


def _check_code(code):
    if not isinstance(code, int) or code < EMPTY_TYPE:
        raise ValueError(f"Invalid type code: {code!r}")


def get_level(code):
    """Return the number of levels packed in ``code``."""
    _check_code(code)
    level = 0
    while code > 1:
        code >>= TYPE_FIELD_BITS
        level += 1
    return level


def get_value(code, level):
    """Return the sibling index stored at 0-based ``level``."""
    if level < 0 or level >= get_level(code):
        raise ValueError(f"Level {level} out of range for type code {code}")
    return (code >> (level * TYPE_FIELD_BITS)) & TYPE_FIELD_MASK


def push_value(code, index):
    """Return ``code`` extended by one level holding ``index``."""
    if not 0 <= index < TYPE_MAX_CHILDREN:
        raise ValueError(f"Sibling index {index} does not fit in {TYPE_FIELD_BITS} bits")
    level = get_level(code)
    if level >= TYPE_MAX_LEVELS:
        raise ValueError(f"Type code already holds the maximum of {TYPE_MAX_LEVELS} levels")
    shift = level * TYPE_FIELD_BITS
    # replace the control field by the value, then move the control one level up
    code &= ~(TYPE_FIELD_MASK << shift)
    code |= index << shift
    return code | (1 << (shift + TYPE_FIELD_BITS))


def pop_value(code):
    """Return ``code`` with its deepest level removed."""
    level = get_level(code)
    if level == 0:
        raise ValueError("Cannot pop a level from the empty type code")
    return trunc_value(code, level - 1)


def trunc_value(code, level):
    """Truncate ``code`` to its first ``level`` levels.

    Codes that are already ``level`` levels deep or shallower are returned
    unchanged.
    """
    if level < 0:
        raise ValueError(f"Negative truncation level: {level}")
    if level >= get_level(code):
        return code
    shift = level * TYPE_FIELD_BITS
    return (code & ((1 << shift) - 1)) | (1 << shift)


def pack_path(indices):
    """Pack a sequence of sibling indices into a type code."""
    code = EMPTY_TYPE
    for index in indices:
        code = push_value(code, index)
    return code


def unpack(code):
    """Return the list of sibling indices packed in ``code``."""
    return [get_value(code, level) for level in range(get_level(code))]
