"""
PROJECT:
-------
media-hypercube

TITLE:
------
geo_reference.py

MAIN OBJECTIVE:
---------------
This script manages the geographic reference table (entity code, display name, coordinates)
joined to network nodes so that an external renderer can label and place them.

Dependencies:
-------------
- pandas
- logging
- typing
- pathlib

MAIN FEATURES:
--------------
1) Reference loading from CSV or DataFrame
2) Display-name lookup with code fallback
3) Coordinate lookup for map placement

Author:
-------
Antoine Lemor
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from media_hypercube.core.constants import REFERENCE_COLUMNS
from media_hypercube.core.exceptions import SchemaError

logger = logging.getLogger(__name__)


class GeoReference:
    """
    Geographic entities known to the renderer (e.g. ISO3 country codes).
    """

    def __init__(self, source: Optional[Union[str, Path, pd.DataFrame]] = None):
        """
        Initialize reference table.

        Args:
            source: Path to a CSV file or a DataFrame with entity_code,
                display_name, longitude, latitude
        """
        self.names: Dict[str, str] = {}
        self.coords: Dict[str, Tuple[float, float]] = {}

        if source is None:
            return
        if isinstance(source, pd.DataFrame):
            self._load_frame(source)
        else:
            self._load_csv(Path(source))

    def _load_csv(self, path: Path) -> None:
        """Load reference from CSV."""
        if not path.exists():
            logger.warning(f"Geographic reference CSV not found at {path}")
            return
        self._load_frame(pd.read_csv(path, dtype={'entity_code': str, 'display_name': str},
                                     keep_default_na=False, na_values={'longitude': [''],
                                                                       'latitude': ['']}))

    def _load_frame(self, df: pd.DataFrame) -> None:
        missing = [col for col in REFERENCE_COLUMNS if col not in df.columns]
        if missing:
            raise SchemaError(f"Geographic reference is missing columns: {missing}")

        for row in df[REFERENCE_COLUMNS].to_dict('records'):
            code = str(row['entity_code']).strip()
            if not code:
                continue
            name = row['display_name']
            self.names[code] = str(name).strip() if isinstance(name, str) and name.strip() else code
            self.coords[code] = (float(row['longitude']), float(row['latitude']))

        logger.info(f"Loaded {len(self.names)} geographic entities")

    @property
    def codes(self) -> List[str]:
        return sorted(self.names)

    def __contains__(self, code: str) -> bool:
        return code in self.names

    def __len__(self) -> int:
        return len(self.names)

    def label(self, code: str) -> str:
        """Display name, or the code itself when unknown."""
        return self.names.get(code, code)

    def coordinates(self, code: str) -> Tuple[float, float]:
        """(longitude, latitude), NaN when unknown."""
        return self.coords.get(code, (float('nan'), float('nan')))
