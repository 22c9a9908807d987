# provider.py
"""
マーカーのデータ提供者。

DataProvider はコアが要求するインタフェース（非同期）。
LocationFileProvider はロケーションJSONを一度だけ読み込み、範囲で絞り込んで返す。
"""
from __future__ import annotations
import logging
import pathlib
from typing import List, Optional, Protocol

from shelter_map.model.loader import LocationLoader
from shelter_map.model.models import LocationMarker, MapBounds

logger = logging.getLogger(__name__)


class DataProvider(Protocol):
    async def fetch_markers(self, bounds: MapBounds) -> List[LocationMarker]: ...


class LocationFileProvider:
    def __init__(self, path: str | pathlib.Path, loader: Optional[LocationLoader] = None):
        self.path = pathlib.Path(path)
        self.loader = loader or LocationLoader()
        self._markers: Optional[List[LocationMarker]] = None

    def _all(self) -> List[LocationMarker]:
        if self._markers is None:
            self._markers = self.loader.load_locations(self.path)
            logger.info("loaded %d locations from %s", len(self._markers), self.path)
        return self._markers

    async def fetch_markers(self, bounds: MapBounds) -> List[LocationMarker]:
        return [m for m in self._all() if bounds.contains(m.position)]
