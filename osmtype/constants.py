from pathlib import Path

# =============================================================================
# ELEMENTS
# =============================================================================

ELEMENT_KINDS = ('point', 'line', 'area')

# Shapely geometry types to element kinds
GEOMETRY_TO_KIND = {
    'Point': 'point',
    'MultiPoint': 'point',
    'LineString': 'line',
    'LinearRing': 'line',
    'MultiLineString': 'line',
    'Polygon': 'area',
    'MultiPolygon': 'area',
}

# =============================================================================
# TAG FILTER
# =============================================================================

# Keys rejected whatever their value. Each of them would shadow a more
# specific classification:
#   [highway=primary][cycleway=lane] parsed as [highway=cycleway]
#   [highway=proposed][proposed=primary] parsed as [highway=primary]
#   [highway=primary][construction=primary] parsed as [highway=construction]
IGNORED_KEYS = ('description', 'cycleway', 'proposed', 'construction')

# Keys processed in any case, even with a negative value
ALWAYS_PROCESSED_KEYS = ('layer', 'oneway')

FILTER_NEGATIVE_VALUES = ('no', 'false', '-1')

# Numbers are matched against tree values only for these keys. A new tree
# type carrying a number (like admin_level=1 or capital=2) must be listed here
# or it will never be produced.
NUMERIC_VALUE_KEYS = ('admin_level', 'capital')

# =============================================================================
# RULE ENGINE
# =============================================================================

RULE_NEGATIVE_VALUES = ('no', 'none', 'false')

PATTERN_ANY = '*'
PATTERN_NEGATIVE = '!'
PATTERN_AFFIRMATIVE = '~'

# =============================================================================
# NAMES
# =============================================================================

NAME_KEY_SEPARATORS = '\t :'
DEFAULT_LANGUAGE = 'default'
INTERNATIONAL_NAME = 'int_name'

# Dummy language sub-tags replaced with the proper code
LANGUAGE_FIXUPS = {
    'ar1': 'ar',
}

# =============================================================================
# FEATURE PARAMETERS
# =============================================================================

# Digits of numeric tag values; str.isdigit() also accepts '²'
ASCII_DIGITS = '0123456789'

LAYER_BOUND = 10
POPULATION_RANK_BASE = 1.1
MAX_RANK = 255
MAX_HOUSENUMBER_LENGTH = 8
MAX_TYPES_COUNT = 7

# Types equal at this depth are merged by finish_adding_types
TYPE_MERGE_LEVEL = 2

# =============================================================================
# TYPE CODES
# =============================================================================

TYPE_FIELD_BITS = 7
TYPE_FIELD_MASK = (1 << TYPE_FIELD_BITS) - 1
TYPE_MAX_LEVELS = 8
TYPE_MAX_CHILDREN = TYPE_FIELD_MASK + 1
EMPTY_TYPE = 1

# =============================================================================
# CACHED TYPES
# =============================================================================

CACHED_TYPE_PATHS = {
    'entrance': ('entrance',),
    'highway': ('highway',),
    'address': ('building', 'address'),
    'oneway': ('hwtag', 'oneway'),
    'private': ('hwtag', 'private'),
    'lit': ('hwtag', 'lit'),
    'nofoot': ('hwtag', 'nofoot'),
    'yesfoot': ('hwtag', 'yesfoot'),
    'rw_station': ('railway', 'station'),
    'rw_station_subway': ('railway', 'station', 'subway'),
    'boundary_administrative': ('boundary', 'administrative'),
}

# =============================================================================
# TRANSIT SYSTEMS
# =============================================================================

# (key, value, city) checked in order on subway stations, first match wins
SUBWAY_NETWORKS = [
    ('network', 'London Underground', 'london'),
    ('network', 'New York City Subway', 'newyork'),
    ('network', 'Московский метрополитен', 'moscow'),
    ('network', 'Петербургский метрополитен', 'spb'),
    ('network', 'Verkehrsverbund Berlin-Brandenburg', 'berlin'),
    ('network', 'Минский метрополитен', 'minsk'),

    ('network', 'Київський метрополітен', 'kiev'),
    ('operator', 'КП «Київський метрополітен»', 'kiev'),

    ('network', 'RATP', 'paris'),
    ('network', 'Metro de Barcelona', 'barcelona'),

    ('network', 'Metro de Madrid', 'madrid'),
    ('operator', 'Metro de Madrid', 'madrid'),

    ('network', 'Metropolitana di Roma', 'roma'),
    ('network', 'ATAC', 'roma'),
]

# Checked on generic railway stations that are not subway stations
RAILWAY_STATION_NETWORKS = [
    ('network', 'London Underground', 'london'),
]

# =============================================================================
# DATA AND I/O
# =============================================================================

DATA_DIR = Path(__file__).parent / 'data'
DEFAULT_CLASSIFICATOR_PATH = DATA_DIR / 'classificator.json'

DEFAULT_CRS = "EPSG:4326"

FEATURE_COLUMNS = ['types', 'type_names', 'name', 'names', 'house_number',
                   'house_name', 'street', 'flats', 'rank', 'ref', 'layer',
                   'reverse_geometry', 'subway_city']

# Columns of osmnx feature frames that are not tags
NON_TAG_COLUMNS = ('geometry', 'nodes', 'ways', 'element', 'element_type', 'id', 'osmid')
