"""
Conversion of raw element tags into feature types, names and address fields.

Pipeline for one element:

1. derive ``layer`` from ``bridge``/``tunnel`` when the element has none
2. extract names (name tags are cleared)
3. base rules: tag rewrites, address, population, ref and layer
4. match types against the classification tree
5. refine types (entrance/address, highway tags, subway networks)
6. finalize types, then hand over to the optional metadata consumer
"""

import logging
import weakref
from concurrent.futures import ThreadPoolExecutor

from osmtype import type_code as tc
from osmtype.constants import (
    CACHED_TYPE_PATHS, SUBWAY_NETWORKS, RAILWAY_STATION_NETWORKS
)
from osmtype.feature_params import FeatureParams
from osmtype.matcher import match_types
from osmtype.names import extract_names
from osmtype.rules import Rule, apply_rules
from osmtype.visibility import DrawableTypes

logger = logging.getLogger(__name__)


class CachedTypes:
    """Type codes the refinement rules refer to, resolved once per tree.

    A path missing from the tree resolves to None and disables the rules
    using it.
    """

    def __init__(self, classificator):
        self._types = {name: classificator.find_type_by_path(path)
                       for name, path in CACHED_TYPE_PATHS.items()}
        cities = {city for _, _, city in SUBWAY_NETWORKS + RAILWAY_STATION_NETWORKS}
        subway = CACHED_TYPE_PATHS['rw_station_subway']
        self._subway_cities = {city: classificator.find_type_by_path(subway + (city,))
                               for city in cities}

    def get(self, name):
        return self._types[name]

    def is_highway(self, code):
        highway = self.get('highway')
        return highway is not None and tc.trunc_value(code, 1) == highway

    def is_rw_station(self, code):
        station = self.get('rw_station')
        return station is not None and code == station

    def is_rw_subway(self, code):
        subway = self.get('rw_station_subway')
        return subway is not None and tc.trunc_value(code, 3) == subway

    def get_subway_city_type(self, city):
        return self._subway_cities.get(city)


_cached_types = weakref.WeakKeyDictionary()


def get_cached_types(classificator):
    # one instance per tree
    cached = _cached_types.get(classificator)
    if cached is None:
        cached = CachedTypes(classificator)
        _cached_types[classificator] = cached
    return cached


# =============================================================================
# RULE TABLES
# =============================================================================

def _rewrite(new_key):
    # [atm=yes] becomes [amenity=atm]
    def action(tag):
        tag.key, tag.value = new_key, tag.key
    return action


def _consume(setter):
    def action(tag):
        setter(tag.value)
        tag.clear()
    return action


def base_rules(params):
    def set_flats(value):
        params.flats = value

    def set_ref(value):
        # road numbers mostly
        params.ref = value

    def set_house_number(value):
        # numbers that are not actual numbers are treated like names
        if not params.add_house_number(value):
            params.add_house_name(value)

    return [
        Rule('atm', 'yes', _rewrite('amenity')),
        Rule('restaurant', 'yes', _rewrite('amenity')),
        Rule('hotel', 'yes', _rewrite('tourism')),
        Rule('addr:housename', '*', _consume(params.add_house_name)),
        Rule('addr:street', '*', _consume(params.add_street)),
        Rule('addr:flats', '*', _consume(set_flats)),
        Rule('addr:housenumber', '*', _consume(set_house_number)),
        Rule('population', '*', _consume(params.set_population)),
        Rule('ref', '*', _consume(set_ref)),
        Rule('layer', '*', lambda tag: params.set_layer(tag.value)),
    ]


def highway_rules(params, types):
    def add(name, reverse=False):
        def action(tag):
            params.add_type(types.get(name))
            if reverse:
                params.reverse_geometry = True
        return action

    return [
        Rule('oneway', 'yes', add('oneway')),
        Rule('oneway', '1', add('oneway')),
        Rule('oneway', '-1', add('oneway', reverse=True)),

        Rule('access', 'private', add('private')),

        Rule('lit', '~', add('lit')),

        Rule('foot', '!', add('nofoot')),

        Rule('foot', '~', add('yesfoot')),
        Rule('sidewalk', '~', add('yesfoot')),
    ]


def network_rules(params, types, table):
    def set_city(city):
        def action(tag):
            if params.subway_city is None:
                params.set_rw_subway_type(city, types.get_subway_city_type(city),
                                          types.get('rw_station'))
        return action

    return [Rule(key, value, set_city(city)) for key, value, city in table]


# =============================================================================
# PIPELINE
# =============================================================================

def preprocess_layer(element):
    """Add a ``layer`` tag derived from ``bridge``/``tunnel`` if none is set."""
    state = {'layer': None}

    def set_layer(value):
        def action(tag):
            state['layer'] = value
        return action

    apply_rules(element, [
        Rule('bridge', 'yes', set_layer('1')),
        Rule('tunnel', 'yes', set_layer('-1')),
    ])

    if state['layer'] is not None and not element.has_tag('layer'):
        element.add_tag('layer', state['layer'])


def refine_types(element, params, types):
    """Apply the refinement rules keyed on the matched types."""
    if not params.is_empty_house():
        # "entrance" goes with refs only; with a house number it is an address
        if params.pop_exact_type(types.get('entrance')):
            params.clear_names()
            params.add_type(types.get('address'))

    highway_done = False
    subway_done = False
    railway_done = False

    # params.types changes inside the loop
    for code in list(params.types):
        if not highway_done and types.is_highway(code):
            apply_rules(element, highway_rules(params, types))
            highway_done = True

        if not subway_done and types.is_rw_subway(code):
            apply_rules(element, network_rules(params, types, SUBWAY_NETWORKS))
            subway_done = True

        if not subway_done and not railway_done and types.is_rw_station(code):
            apply_rules(element, network_rules(params, types, RAILWAY_STATION_NETWORKS))
            railway_done = True


def get_name_and_type(element, params, classificator, is_drawable=None,
                      metadata_consumer=None, cached_types=None):
    """Fill ``params`` from the tags of ``element``.

    Tags are consumed along the way: names and address tags are cleared in
    place, so ``element`` should not be classified twice.

    Parameters
    ----------
    element : OsmElement
    params : FeatureParams
    classificator : Classificator
        Shared read-only classification tree.
    is_drawable : callable, optional
        ``is_drawable(code) -> bool``. Defaults to ``DrawableTypes(classificator)``.
    metadata_consumer : callable, optional
        ``metadata_consumer(element, params)``, called last.
    cached_types : CachedTypes, optional
        Resolved refinement types of ``classificator``. Looked up when omitted.

    Returns
    -------
    FeatureParams
    """
    if is_drawable is None:
        is_drawable = DrawableTypes(classificator)
    types = cached_types if cached_types is not None else get_cached_types(classificator)

    preprocess_layer(element)
    extract_names(element, params)
    apply_rules(element, base_rules(params))

    match_types(element, params, classificator, is_drawable)
    refine_types(element, params, types)

    boundary = types.get('boundary_administrative')
    params.finish_adding_types(exempt=() if boundary is None else (boundary,))
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Element %s: %s", element.osm_id,
                     [classificator.get_readable_name(t) for t in params.types])

    if metadata_consumer is not None:
        metadata_consumer(element, params)
    return params


def classify_element(element, classificator, is_drawable=None, metadata_consumer=None,
                     cached_types=None):
    """Classify one element into fresh ``FeatureParams``."""
    return get_name_and_type(element, FeatureParams(), classificator,
                             is_drawable=is_drawable, metadata_consumer=metadata_consumer,
                             cached_types=cached_types)


def classify_elements(elements, classificator, is_drawable=None,
                      metadata_consumer=None, max_workers=None):
    """Classify a batch of elements, keeping input order.

    Elements are independent; with ``max_workers`` > 1 they are spread over a
    thread pool sharing the read-only tree. An internal fault raised for one
    element aborts the batch.
    """
    if is_drawable is None:
        is_drawable = DrawableTypes(classificator)
    # resolved before the pool starts, workers only read it
    types = get_cached_types(classificator)

    def run(element):
        return classify_element(element, classificator, is_drawable=is_drawable,
                                metadata_consumer=metadata_consumer, cached_types=types)

    elements = list(elements)
    logger.debug("Classifying %d elements (max_workers=%s)", len(elements), max_workers)
    if max_workers is None or max_workers <= 1:
        return [run(e) for e in elements]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(run, elements))
