"""
Extraction of multilingual names from ``name``, ``name:<lang>`` and
``int_name`` tags.
"""

import re
import unicodedata

from osmtype.constants import (
    NAME_KEY_SEPARATORS, DEFAULT_LANGUAGE, INTERNATIONAL_NAME, LANGUAGE_FIXUPS
)
from osmtype.tags import for_each_tag

_SEPARATORS_RE = re.compile('[' + re.escape(NAME_KEY_SEPARATORS) + ']+')


def get_lang_by_key(key):
    """Language code of a name key, or None if the key is not a name key.

    >>> get_lang_by_key('name:en')
    'en'
    >>> get_lang_by_key('name')
    'default'
    """
    tokens = [t for t in _SEPARATORS_RE.split(key) if t]
    if not tokens:
        return None
    # international (latin) name
    if tokens[0] == INTERNATIONAL_NAME:
        return INTERNATIONAL_NAME
    if tokens[0] != 'name':
        return None
    lang = tokens[1].lower() if len(tokens) > 1 else DEFAULT_LANGUAGE
    return LANGUAGE_FIXUPS.get(lang, lang)


def normalize_name(value):
    # NFKC, so that equivalent strings compare and search equal
    return unicodedata.normalize('NFKC', value)


class NameExtractor:
    """Moves name tags of one element into ``params.names``.

    The first name per language wins. Handled tags are cleared so later
    stages never see them.
    """

    def __init__(self, params):
        self.params = params

    def __call__(self, tag):
        if not tag.value:
            return False
        lang = get_lang_by_key(tag.key)
        if lang is None or lang in self.params.names:
            return False
        self.params.add_name(lang, normalize_name(tag.value))
        tag.clear()
        # keep iterating over the remaining tags
        return False


def extract_names(element, params):
    for_each_tag(element, NameExtractor(params))
    return params.names
