# projection.py
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

import numpy as np

from shelter_map.model.models import GeoPoint

INITIAL_RES = 156543.03392804097  # m/px at z=0 (3857, 256px)
ORIGIN_SHIFT = 20037508.342789244  # 3857 の半周 (m)
MAX_LAT = 85.05112877980659        # Web Mercator の緯度上限


@dataclass(frozen=True)
class WebMercatorProjection:
    """EPSG:4326 <-> EPSG:3857"""
    def __post_init__(self):
        from pyproj import Transformer
        object.__setattr__(self, "_to_merc",
            Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True))
        object.__setattr__(self, "_to_geo",
            Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True))
    # スカラでも numpy 配列でも可
    def lonlat_to_xy(self, lon, lat):
        return self._to_merc.transform(lon, np.clip(lat, -MAX_LAT, MAX_LAT))
    def xy_to_lonlat(self, x, y):
        return self._to_geo.transform(x, y)


@lru_cache(maxsize=1)
def web_mercator() -> WebMercatorProjection:
    return WebMercatorProjection()


def resolution(zoom: float) -> float:
    """zoom における m/px (256px タイル)"""
    return INITIAL_RES / (2 ** zoom)


@dataclass(frozen=True)
class ScreenProjector:
    """
    緯度経度 <-> 世界ピクセル座標（左上原点、x=東+, y=南+）。
    クラスタ半径など「画面上のピクセル距離」を扱うために使う。
    """
    zoom: float

    def to_pixels(self, lats, lons) -> np.ndarray:
        """(n,) の緯度・経度配列 → (n,2) のピクセル座標"""
        lats = np.asarray(lats, dtype=float)
        lons = np.asarray(lons, dtype=float)
        if lats.size == 0:
            return np.empty((0, 2))
        X, Y = web_mercator().lonlat_to_xy(lons, lats)
        res = resolution(self.zoom)
        px = (np.asarray(X) + ORIGIN_SHIFT) / res
        py = (ORIGIN_SHIFT - np.asarray(Y)) / res
        return np.column_stack([px, py])

    def point_to_pixel(self, p: GeoPoint) -> Tuple[float, float]:
        xy = self.to_pixels([p.lat], [p.lon])[0]
        return float(xy[0]), float(xy[1])

    def pixel_to_point(self, px: float, py: float) -> GeoPoint:
        res = resolution(self.zoom)
        X = px * res - ORIGIN_SHIFT
        Y = ORIGIN_SHIFT - py * res
        _, lat = web_mercator().xy_to_lonlat(X, Y)
        # 経度は線形。pyproj の ±180 正規化で東西が入れ替わらないよう直接求める
        lon = X / ORIGIN_SHIFT * 180.0
        return GeoPoint(float(lat), float(lon))

    def world_size_px(self) -> float:
        return 256.0 * (2 ** self.zoom)
