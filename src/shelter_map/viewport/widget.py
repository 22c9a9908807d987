# widget.py
"""
地図ウィジェットの能力（pan/fly/setView/getBounds/invalidateSize）。

MapWidget はコアが要求するインタフェース、
HeadlessMap はブラウザ無しで動く pyproj ベースの実装（CLI/テスト用）。
"""
from __future__ import annotations
import logging
from typing import List, Optional, Protocol, Tuple

from shelter_map.model.models import GeoPoint, MapBounds
from .projection import MAX_LAT, ScreenProjector

logger = logging.getLogger(__name__)

WORLD_BOUNDS = MapBounds.from_corners((90.0, 180.0), (-90.0, -180.0))


class MapWidget(Protocol):
    def pan_to(self, p: GeoPoint) -> None: ...
    def fly_to(self, p: GeoPoint, zoom: Optional[float] = None) -> None: ...
    def set_view(self, p: GeoPoint, zoom: Optional[float] = None) -> None: ...
    def get_bounds(self) -> MapBounds: ...
    def get_center(self) -> GeoPoint: ...
    def get_zoom(self) -> float: ...
    def invalidate_size(self, width_px: Optional[int] = None, height_px: Optional[int] = None) -> None: ...


class HeadlessMap:
    """
    中心・ズーム・ピクセルサイズだけを持つ地図。
    - zoom は [min_zoom, max_zoom] に丸める
    - center は max_bounds の内側に丸める
    - history に (操作名, center, zoom) を記録
    """

    def __init__(
        self,
        center: GeoPoint,
        zoom: float = 7,
        *,
        width_px: int = 1024,
        height_px: int = 768,
        min_zoom: float = 5,
        max_zoom: float = 18,
        max_bounds: MapBounds = WORLD_BOUNDS,
    ):
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.max_bounds = max_bounds
        self.width_px = width_px
        self.height_px = height_px
        self._zoom = self._clamp_zoom(zoom)
        self._center = self._clamp_center(center)
        self.history: List[Tuple[str, GeoPoint, float]] = []

    # --- 内部 ---

    def _clamp_zoom(self, zoom: float) -> float:
        return max(self.min_zoom, min(self.max_zoom, zoom))

    def _clamp_center(self, p: GeoPoint) -> GeoPoint:
        ne, sw = self.max_bounds.north_east, self.max_bounds.south_west
        lat = max(sw.lat, min(ne.lat, p.lat))
        lon = max(sw.lon, min(ne.lon, p.lon))
        return GeoPoint(lat, lon)

    def _move(self, op: str, p: GeoPoint, zoom: Optional[float]) -> None:
        if zoom is not None:
            self._zoom = self._clamp_zoom(zoom)
        self._center = self._clamp_center(p)
        self.history.append((op, self._center, self._zoom))
        logger.debug("%s -> (%.6f, %.6f) z=%s", op, self._center.lat, self._center.lon, self._zoom)

    # --- MapWidget ---

    def pan_to(self, p: GeoPoint) -> None:
        self._move("pan_to", p, None)

    def fly_to(self, p: GeoPoint, zoom: Optional[float] = None) -> None:
        self._move("fly_to", p, zoom)

    def set_view(self, p: GeoPoint, zoom: Optional[float] = None) -> None:
        self._move("set_view", p, zoom)

    def get_center(self) -> GeoPoint:
        return self._center

    def get_zoom(self) -> float:
        return self._zoom

    def get_bounds(self) -> MapBounds:
        sp = ScreenProjector(self._zoom)
        cx, cy = sp.point_to_pixel(self._center)
        world = sp.world_size_px()
        half_w, half_h = self.width_px / 2.0, self.height_px / 2.0
        # 世界の外（経度 ±180 超）には広げない
        left, right = max(0.0, cx - half_w), min(world, cx + half_w)
        top, bottom = max(0.0, cy - half_h), min(world, cy + half_h)
        ne = sp.pixel_to_point(right, top)
        sw = sp.pixel_to_point(left, bottom)
        return MapBounds(
            north_east=GeoPoint(min(ne.lat, MAX_LAT), ne.lon),
            south_west=GeoPoint(max(sw.lat, -MAX_LAT), sw.lon),
        )

    def invalidate_size(self, width_px: Optional[int] = None, height_px: Optional[int] = None) -> None:
        if width_px is not None:
            self.width_px = width_px
        if height_px is not None:
            self.height_px = height_px
        logger.debug("invalidate_size %dx%d", self.width_px, self.height_px)
