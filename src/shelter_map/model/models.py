from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


# --- 幾何 -------------------------------------------------------------

@dataclass(frozen=True)
class GeoPoint:
    """緯度経度（度）。等価性は座標の一致"""
    lat: float
    lon: float


@dataclass(frozen=True)
class MapBounds:
    """地図ウィジェットの表示範囲（北東・南西）"""
    north_east: GeoPoint
    south_west: GeoPoint

    @classmethod
    def from_corners(cls, ne: Tuple[float, float], sw: Tuple[float, float]) -> "MapBounds":
        return cls(north_east=GeoPoint(*ne), south_west=GeoPoint(*sw))

    def contains(self, p: GeoPoint) -> bool:
        return (
            self.south_west.lat <= p.lat <= self.north_east.lat and
            self.south_west.lon <= p.lon <= self.north_east.lon
        )

    def center(self) -> GeoPoint:
        return GeoPoint(
            (self.north_east.lat + self.south_west.lat) * 0.5,
            (self.north_east.lon + self.south_west.lon) * 0.5,
        )


# --- ロケーション -----------------------------------------------------

class LocationType(str, Enum):
    CABIN = "cabin"
    CABIN_FIREPLACE = "cabinFireplace"
    SHED = "shed"
    WATER_SOURCE = "waterSource"
    CAVE = "cave"
    PASTURE = "pasture"
    RAISED_HIDE = "raisedHide"
    TOWER = "tower"

    @classmethod
    def parse(cls, value: str) -> Union["LocationType", str]:
        """既知の種別なら Enum、未知ならそのまま文字列で返す"""
        try:
            return cls(value)
        except ValueError:
            return value


@dataclass(frozen=True)
class LocationMarker:
    id: str
    position: GeoPoint
    type: Union[LocationType, str]
    name: str = ""
    phone: Optional[str] = None
    waiting_time: Optional[float] = None

    @property
    def type_key(self) -> str:
        return self.type.value if isinstance(self.type, LocationType) else str(self.type)


# --- アクティブマーカー -----------------------------------------------

class MarkerSource(str, Enum):
    EXISTING_MARKER = "existing"   # 既存マーカーをクリック
    NEW_PIN = "new_pin"            # 新規に置いたピン


@dataclass(frozen=True)
class ActiveMarker:
    position: GeoPoint
    source: MarkerSource

    def is_draggable(self, edit_mode: bool) -> bool:
        return edit_mode and self.source is MarkerSource.NEW_PIN


__all__ = [
    "GeoPoint",
    "MapBounds",
    "LocationType",
    "LocationMarker",
    "MarkerSource",
    "ActiveMarker",
]
