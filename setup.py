#!/usr/bin/env python
from pathlib import Path
from setuptools import setup, find_packages

long_description = Path("README.md").read_text(encoding="utf-8")

setup(
    name='osmtype',
    version='0.1.0',
    description='osmtype converts raw OpenStreetMap elements and their free-text tags into normalized, typed features: packed hierarchical type codes from a classification tree, multilingual names and structured address fields.',
    long_description=long_description,
    long_description_content_type='text/markdown',

    packages=find_packages(include=['osmtype', 'osmtype.*']),
    python_requires='>=3.9',

    install_requires=[
        'pandas',
        'geopandas',
        'numpy',
        'shapely',
        'osmnx',
    ],

    extras_require={
        'test': [
            'pytest',
        ]
    },

    package_data={'osmtype': ['data/*']},
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
