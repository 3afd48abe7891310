import math

import pytest

from osmtype.classificator import Classificator, load_default_classificator
from osmtype.feature_params import FeatureParams
from osmtype.osm2type import (
    CachedTypes, classify_element, classify_elements, get_name_and_type, preprocess_layer
)
from osmtype.tags import OsmElement


@pytest.fixture(scope="module")
def classif():
    return load_default_classificator()


def classify(classif, tags, **kwargs):
    element = OsmElement.from_dict(tags) if isinstance(tags, dict) else OsmElement(tags)
    return classify_element(element, classif, **kwargs)


def type_names(classif, params):
    return [classif.get_readable_name(t) for t in params.types]


def test_named_oneway_highway(classif):
    params = classify(classif, {"highway": "primary", "oneway": "yes", "name": "Main St"})
    assert params.names == {"default": "Main St"}
    assert type_names(classif, params) == ["highway-primary", "hwtag-oneway"]
    assert params.reverse_geometry is False


def test_reversed_oneway(classif):
    params = classify(classif, {"highway": "residential", "oneway": "-1"})
    assert "hwtag-oneway" in type_names(classif, params)
    assert params.reverse_geometry is True


@pytest.mark.parametrize("tags, expected", [
    ({"access": "private"}, "hwtag-private"),
    ({"lit": "yes"}, "hwtag-lit"),
    ({"foot": "no"}, "hwtag-nofoot"),
    ({"foot": "designated"}, "hwtag-yesfoot"),
    ({"sidewalk": "both"}, "hwtag-yesfoot"),
])
def test_highway_refinements(classif, tags, expected):
    params = classify(classif, {"highway": "path", **tags})
    assert type_names(classif, params) == ["highway-path", expected]


def test_highway_refinements_need_a_highway(classif):
    params = classify(classif, {"amenity": "cafe", "oneway": "yes", "lit": "yes"})
    assert type_names(classif, params) == ["amenity-cafe"]


def test_unlit_highway(classif):
    params = classify(classif, {"highway": "primary", "lit": "no"})
    assert type_names(classif, params) == ["highway-primary"]


def test_ignored_keys_do_not_shadow_classification(classif):
    params = classify(classif, {"highway": "primary", "cycleway": "lane"})
    assert type_names(classif, params) == ["highway-primary"]
    params = classify(classif, {"highway": "construction", "construction": "primary"})
    assert type_names(classif, params) == ["highway"]


def test_building_with_address(classif):
    params = classify(classif, {"building": "yes", "addr:housenumber": "12", "addr:street": "Elm"})
    assert params.house_number == "12"
    assert params.street == "Elm"
    assert type_names(classif, params) == ["building"]


def test_entrance_with_address_becomes_address(classif):
    params = classify(classif, {"entrance": "yes", "addr:housenumber": "5", "name": "Door"})
    assert type_names(classif, params) == ["building-address"]
    assert params.names == {}
    assert params.house_number == "5"


def test_entrance_without_address_is_kept(classif):
    params = classify(classif, {"entrance": "yes", "ref": "A", "name": "Door"})
    assert type_names(classif, params) == ["entrance"]
    assert params.ref == "A"
    assert params.names == {"default": "Door"}


def test_address_tags(classif):
    params = classify(classif, {"building": "yes", "addr:housenumber": "Villa Rosa",
                                "addr:flats": "1-12"})
    assert params.house_number == ""
    assert params.house_name == "Villa Rosa"
    assert params.flats == "1-12"

    params = classify(classif, {"building": "yes", "addr:housename": "Rose Cottage",
                                "addr:housenumber": "007"})
    assert params.house_name == "Rose Cottage"
    assert params.house_number == "7"


def test_population_and_ref(classif):
    params = classify(classif, {"place": "town", "population": "1000000"})
    assert params.rank == int(math.log(1000000) / math.log(1.1))
    assert type_names(classif, params) == ["place-town"]

    params = classify(classif, {"place": "town", "population": "about 5000"})
    assert params.rank == 0

    params = classify(classif, {"highway": "motorway", "ref": "M1"})
    assert params.ref == "M1"
    assert type_names(classif, params) == ["highway-motorway"]


def test_tag_rewrites(classif):
    assert type_names(classif, classify(classif, {"atm": "yes"})) == ["amenity-atm"]
    assert type_names(classif, classify(classif, {"restaurant": "yes"})) == ["amenity-restaurant"]
    assert type_names(classif, classify(classif, {"hotel": "yes"})) == ["tourism-hotel"]


def test_bridge_derives_layer(classif):
    element = OsmElement.from_dict({"highway": "primary", "bridge": "yes"})
    params = classify_element(element, classif)
    assert params.layer == 1
    assert element.get_tag("layer") == "1"
    assert type_names(classif, params) == ["highway-primary-bridge"]


def test_existing_layer_wins(classif):
    params = classify(classif, {"highway": "primary", "tunnel": "yes", "layer": "-2"})
    assert params.layer == -2
    assert type_names(classif, params) == ["highway-primary-tunnel"]

    params = classify(classif, {"highway": "primary", "layer": "15"})
    assert params.layer == 10

    params = classify(classif, {"highway": "primary", "layer": "no"})
    assert params.layer == 0


def test_preprocess_layer_keeps_explicit_layer():
    element = OsmElement.from_dict({"tunnel": "yes", "layer": "-3"})
    preprocess_layer(element)
    assert len(element.tags) == 2

    element = OsmElement.from_dict({"tunnel": "yes"})
    preprocess_layer(element)
    assert element.get_tag("layer") == "-1"


def test_admin_boundary_and_capital(classif):
    params = classify(classif, {"boundary": "administrative", "admin_level": "4"})
    assert type_names(classif, params) == ["boundary-administrative-4"]

    params = classify(classif, {"place": "city", "capital": "2", "name": "Paris"})
    assert type_names(classif, params) == ["place-city-capital-2"]


def test_subway_station_network(classif):
    params = classify(classif, [("railway", "station"), ("station", "subway"),
                                ("network", "London Underground")])
    assert type_names(classif, params) == ["railway-station-subway-london"]
    assert params.subway_city == "london"


def test_subway_station_operator(classif):
    params = classify(classif, [("railway", "station"), ("station", "subway"),
                                ("operator", "КП «Київський метрополітен»")])
    assert type_names(classif, params) == ["railway-station-subway-kiev"]


def test_first_matching_network_wins(classif):
    params = classify(classif, [("railway", "station"), ("station", "subway"),
                                ("network", "RATP"), ("operator", "Metro de Madrid")])
    assert type_names(classif, params) == ["railway-station-subway-paris"]
    assert params.subway_city == "paris"


def test_railway_station_fallback(classif):
    params = classify(classif, {"railway": "station", "network": "London Underground"})
    assert type_names(classif, params) == ["railway-station-subway-london"]

    # the fallback table only knows London
    params = classify(classif, {"railway": "station", "network": "RATP"})
    assert type_names(classif, params) == ["railway-station"]
    assert params.subway_city is None


def test_hidden_types_are_not_matched(classif):
    params = classify(classif, {"hwtag": "oneway"})
    assert params.types == []


def test_only_names(classif):
    params = classify(classif, {"name": "Nowhere", "name:de": "Nirgendwo"})
    assert params.types == []
    assert params.names == {"default": "Nowhere", "de": "Nirgendwo"}


def test_deterministic(classif):
    tags = [("highway", "primary"), ("name", "Main St"), ("oneway", "yes"),
            ("bridge", "yes"), ("amenity", "fuel"), ("addr:housenumber", "3")]
    first = classify(classif, tags)
    second = classify(classif, tags)
    assert first.to_dict() == second.to_dict()


def test_custom_drawable_predicate(classif):
    cafe = classif.get_type_by_path("amenity-cafe")
    params = classify(classif, {"amenity": "cafe", "shop": "bakery"},
                      is_drawable=lambda code: code != cafe)
    assert type_names(classif, params) == ["shop-bakery"]


def test_metadata_consumer_runs_last(classif):
    seen = {}

    def consumer(element, params):
        seen["tags"] = element.to_dict()
        seen["types"] = list(params.types)
        params.metadata["opening_hours"] = element.get_tag("opening_hours")

    element = OsmElement.from_dict({"amenity": "cafe", "name": "Joe's", "opening_hours": "24/7"})
    params = get_name_and_type(element, FeatureParams(), classif, metadata_consumer=consumer)
    assert seen["tags"] == {"amenity": "cafe", "opening_hours": "24/7"}
    assert seen["types"] == params.types
    assert params.metadata == {"opening_hours": "24/7"}


def test_tree_without_cached_types():
    tree = Classificator.from_dict({"highway": {"primary": {}}, "railway": {"station": {}}})
    params = classify(tree, {"highway": "primary", "oneway": "yes",
                             "addr:housenumber": "1"})
    assert type_names(tree, params) == ["highway-primary"]

    params = classify(tree, {"railway": "station", "network": "London Underground"})
    assert type_names(tree, params) == ["railway-station"]
    assert params.subway_city == "london"

    types = CachedTypes(tree)
    assert types.get("entrance") is None
    assert not types.is_rw_subway(tree.get_type_by_path("railway-station"))


def test_batch_preserves_order(classif):
    tags = [{"highway": "primary"}, {"amenity": "bank"}, {"shop": "bakery"},
            {"name": "Nothing"}, {"waterway": "river"}] * 4
    elements = [OsmElement.from_dict(t) for t in tags]
    results = classify_elements(elements, classif, max_workers=4)
    expected = [["highway-primary"], ["amenity-bank"], ["shop-bakery"], [], ["waterway-river"]] * 4
    assert [type_names(classif, p) for p in results] == expected

    inline = classify_elements([OsmElement.from_dict(t) for t in tags], classif)
    assert [p.to_dict() for p in inline] == [p.to_dict() for p in results]


@pytest.mark.parametrize("tags, field, expected, names", [
    ({"place": "town", "population": "²"}, "rank", 0, ["place-town"]),
    ({"building": "yes", "addr:housenumber": "1²"}, "house_number", "1²", ["building"]),
    ({"highway": "primary", "layer": "²"}, "layer", 0, ["highway-primary"]),
])
def test_non_ascii_digits_in_numeric_tags(classif, tags, field, expected, names):
    params = classify(classif, tags)
    assert getattr(params, field) == expected
    assert type_names(classif, params) == names


def test_batch_resolves_cached_types_once(classif, monkeypatch):
    from osmtype import osm2type

    calls = []
    real = osm2type.get_cached_types

    def counting(tree):
        calls.append(tree)
        return real(tree)

    monkeypatch.setattr(osm2type, "get_cached_types", counting)
    elements = [OsmElement.from_dict({"highway": "primary", "oneway": "yes"}) for _ in range(8)]
    results = classify_elements(elements, classif, max_workers=4)
    assert calls == [classif]
    assert all(type_names(classif, p) == ["highway-primary", "hwtag-oneway"] for p in results)


def test_explicit_cached_types(classif):
    types = CachedTypes(classif)
    element = OsmElement.from_dict({"railway": "station", "network": "London Underground"})
    params = classify_element(element, classif, cached_types=types)
    assert type_names(classif, params) == ["railway-station-subway-london"]
