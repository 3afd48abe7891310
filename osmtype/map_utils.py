"""
OpenStreetMap data utilities: download raw features with osmnx and classify
the rows of a (Geo)DataFrame into feature types, names and address fields.
"""

import logging
import warnings

import geopandas as gpd
import numpy as np
import pandas as pd
import osmnx as ox
from osmnx._errors import InsufficientResponseError

from osmtype.classificator import load_default_classificator
from osmtype.constants import DEFAULT_CRS, FEATURE_COLUMNS, GEOMETRY_TO_KIND, NON_TAG_COLUMNS
from osmtype.osm2type import classify_elements
from osmtype.tags import OsmElement, Tag

logger = logging.getLogger(__name__)


def _is_missing(value):
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return value is pd.NA or value is pd.NaT


def _tag_value(value):
    # Lists of values are joined the OSM way
    if isinstance(value, (list, tuple, set, np.ndarray)):
        return ';'.join(str(v) for v in value)
    return str(value)


def _kind_from_geometry(geometry):
    if geometry is None or getattr(geometry, 'is_empty', True):
        return 'point'
    kind = GEOMETRY_TO_KIND.get(geometry.geom_type)
    if kind is None:
        warnings.warn(f"Unsupported geometry type '{geometry.geom_type}', classified as a point.")
        return 'point'
    return kind


# =============================================================================
# CONVERSION
# =============================================================================

def element_from_row(row, kind=None):
    """Build an OsmElement from one row of an osmnx features frame.

    Tags are the non-null, non-geometry columns in column order. The element
    kind is derived from the row geometry unless given.
    """
    tags = []
    for column, value in row.items():
        if column in NON_TAG_COLUMNS or _is_missing(value):
            continue
        tags.append(Tag(str(column), _tag_value(value)))

    if kind is None:
        kind = _kind_from_geometry(row.get('geometry')) if 'geometry' in row else 'point'
    return OsmElement(tags, kind=kind, osm_id=row.name)


def elements_from_gdf(gdf):
    return [element_from_row(row) for _, row in gdf.iterrows()]


def classify_features(gdf, classificator=None, is_drawable=None,
                      metadata_consumer=None, max_workers=None):
    """Classify every row of a features frame.

    Parameters
    ----------
    gdf : pd.DataFrame or gpd.GeoDataFrame
        One OSM element per row, tag keys as columns.
    classificator : Classificator, optional
        Defaults to the tree shipped with the package.
    is_drawable, metadata_consumer :
        See ``osmtype.osm2type.get_name_and_type``.
    max_workers : int, optional
        Thread pool size; classification runs inline when None.

    Returns
    -------
    pd.DataFrame or gpd.GeoDataFrame
        Copy of ``gdf`` with the columns of ``FEATURE_COLUMNS`` added.
    """
    if not isinstance(gdf, pd.DataFrame):
        raise TypeError("Input 'gdf' must be a pandas DataFrame or GeoDataFrame.")
    if classificator is None:
        classificator = load_default_classificator()

    result = gdf.copy()
    if len(result) == 0:
        for col in FEATURE_COLUMNS:
            result[col] = pd.Series(dtype=object)
        return result

    elements = elements_from_gdf(result)
    params = classify_elements(elements, classificator, is_drawable=is_drawable,
                               metadata_consumer=metadata_consumer, max_workers=max_workers)

    records = []
    for p in params:
        record = p.to_dict()
        record['type_names'] = [classificator.get_readable_name(t) for t in p.types]
        records.append(record)
    features = pd.DataFrame(records, index=result.index)

    for col in FEATURE_COLUMNS:
        result[col] = features[col]
    logger.debug("Classified %d features", len(result))
    return result


# =============================================================================
# DOWNLOAD FUNCTIONS
# =============================================================================

def download_osm_features(bbox_or_city, tags, crs=DEFAULT_CRS):
    """Fetch raw OSM features with osmnx.

    Parameters
    ----------
    bbox_or_city : tuple, str or shapely geometry
        Bounding box as (west, south, east, north), a place name or a polygon.
    tags : dict
        osmnx tags filter, e.g. ``{"highway": True}``.
    crs : str, default "EPSG:4326"

    Returns
    -------
    gpd.GeoDataFrame
        Empty when OpenStreetMap has nothing matching.
    """
    try:
        if isinstance(bbox_or_city, str):
            features = ox.features_from_place(bbox_or_city, tags)
        elif hasattr(bbox_or_city, 'geom_type'):
            features = ox.features_from_polygon(bbox_or_city, tags)
        else:
            features = ox.features_from_bbox(bbox=tuple(bbox_or_city), tags=tags)
    except InsufficientResponseError:
        features = None

    if features is None or len(features) == 0:
        warnings.warn(f"No OSM features found for tags {tags}.")
        return gpd.GeoDataFrame(columns=['geometry'], geometry='geometry', crs=crs)
    return features.to_crs(crs)


def download_and_classify(bbox_or_city, tags, crs=DEFAULT_CRS, classificator=None,
                          max_workers=None):
    """Download OSM features and classify them in one go."""
    features = download_osm_features(bbox_or_city, tags, crs=crs)
    return classify_features(features, classificator=classificator, max_workers=max_workers)
