"""Accumulator of everything classification derives from one element."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from osmtype import type_code as tc
from osmtype.constants import (
    ASCII_DIGITS,
    LAYER_BOUND, POPULATION_RANK_BASE, MAX_RANK, MAX_HOUSENUMBER_LENGTH,
    MAX_TYPES_COUNT, TYPE_MERGE_LEVEL, DEFAULT_LANGUAGE
)


def is_house_number(value):
    return 0 < len(value) <= MAX_HOUSENUMBER_LENGTH and value[0] in ASCII_DIGITS


def population_rank(value):
    """Rank of a population count, None when ``value`` is not a count."""
    value = value.strip()
    if not value or not all(ch in ASCII_DIGITS for ch in value):
        return None
    n = int(value)
    if n < 1:
        return 0
    return min(int(math.log(n) / math.log(POPULATION_RANK_BASE)), MAX_RANK)


def parse_layer(value):
    # leading integer, like atoi
    text = value.strip()
    sign = 1
    if text[:1] in ('+', '-'):
        sign = -1 if text[0] == '-' else 1
        text = text[1:]
    digits = ''
    for ch in text:
        if ch not in ASCII_DIGITS:
            break
        digits += ch
    if not digits:
        return 0
    return max(-LAYER_BOUND, min(LAYER_BOUND, sign * int(digits)))


@dataclass
class FeatureParams:
    types: List[int] = field(default_factory=list)
    names: Dict[str, str] = field(default_factory=dict)
    house_number: str = ''
    house_name: str = ''
    street: str = ''
    flats: str = ''
    rank: int = 0
    ref: str = ''
    layer: int = 0
    reverse_geometry: bool = False
    subway_city: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    # --- types ---------------------------------------------------------------

    def add_type(self, code):
        if code is not None and code not in self.types:
            self.types.append(code)

    def has_type(self, code):
        return code in self.types

    def pop_exact_type(self, code):
        if code is None or not self.has_type(code):
            return False
        self.types.remove(code)
        return True

    def set_rw_subway_type(self, city, subway_type, station_type):
        """Turn the generic railway station into the subway station of ``city``.

        ``subway_type`` is None when the tree has no type for this city, in
        which case only the city is recorded.
        """
        self.subway_city = city
        if subway_type is None or station_type is None:
            return
        for i, code in enumerate(self.types):
            if tc.trunc_value(code, 2) == station_type:
                self.types[i] = subway_type
                break

    def finish_adding_types(self, exempt=()):
        """Collapse the type list into its canonical form.

        Types equal at the merge level are assumed equivalent and only the
        deepest is kept (``place-city-capital`` wins over ``place-city``),
        except for types whose truncation is in ``exempt``. Duplicates are
        removed and the list is capped.
        """
        exempt = set(exempt)
        remaining = list(self.types)
        new_types = []
        while remaining:
            candidate = remaining.pop(0)
            head = tc.trunc_value(candidate, TYPE_MERGE_LEVEL)
            if head not in exempt:
                kept = []
                for code in remaining:
                    if tc.trunc_value(code, TYPE_MERGE_LEVEL) == head:
                        if tc.get_level(code) > tc.get_level(candidate):
                            candidate = code
                    else:
                        kept.append(code)
                remaining = kept
            if candidate not in new_types:
                new_types.append(candidate)
        self.types = new_types[:MAX_TYPES_COUNT]
        return bool(self.types)

    # --- names ---------------------------------------------------------------

    def add_name(self, lang, name):
        if lang in self.names:
            return False
        self.names[lang] = name
        return True

    def get_name(self, lang=DEFAULT_LANGUAGE):
        return self.names.get(lang)

    def clear_names(self):
        self.names.clear()

    # --- address -------------------------------------------------------------

    def add_house_number(self, value):
        """Store a house number, False if ``value`` is not one."""
        if not is_house_number(value):
            return False
        if all(ch in ASCII_DIGITS for ch in value):
            # drop leading zeros
            value = str(int(value))
        self.house_number = value
        return True

    def add_house_name(self, value):
        if self.house_name or not value:
            return False
        self.house_name = value
        return True

    def add_street(self, value):
        self.street = value

    def is_empty_house(self):
        return not self.house_number and not self.house_name

    # --- misc ----------------------------------------------------------------

    def set_population(self, value):
        rank = population_rank(value)
        if rank is not None:
            self.rank = rank

    def set_layer(self, value):
        if self.layer == 0:
            self.layer = parse_layer(value)

    def to_dict(self):
        return {
            'types': list(self.types),
            'name': self.get_name(),
            'names': dict(self.names),
            'house_number': self.house_number,
            'house_name': self.house_name,
            'street': self.street,
            'flats': self.flats,
            'rank': self.rank,
            'ref': self.ref,
            'layer': self.layer,
            'reverse_geometry': self.reverse_geometry,
            'subway_city': self.subway_city,
        }
