"""
PROJECT:
-------
media-hypercube

TITLE:
------
__init__.py (utils module)

MAIN OBJECTIVE:
---------------
This script initializes the utils module, exposing the geographic reference table.

Dependencies:
-------------
- media_hypercube.utils.geo_reference

MAIN FEATURES:
--------------
1) Exports GeoReference

Author:
-------
Antoine Lemor
"""

from media_hypercube.utils.geo_reference import GeoReference

__all__ = ['GeoReference']
