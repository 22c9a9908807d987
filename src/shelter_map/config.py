# config.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import json

from shelter_map.markers.icons import ICON_DIR, default_icon_table
from shelter_map.model.models import GeoPoint, MapBounds

@dataclass
class MapConfig:
    locations: Optional[str] = None
    center: Optional[list[float]] = None   # [lat, lon]。指定時は lat/lon より優先
    lat: float = 49.6
    lon: float = 20.0
    zoom: float = 7
    min_zoom: float = 5
    max_zoom: float = 18
    max_bounds: list[list[float]] = field(default_factory=lambda: [[-90.0, -180.0], [90.0, 180.0]])
    width_px: int = 1024
    height_px: int = 768
    cluster_radius: float = 60
    disable_clustering_at_zoom: float = 11
    cluster_icon_size: int = 40
    marker_icon_size: int = 30
    tiles: str = "OpenStreetMap.Mapnik"
    overlay_map: bool = False
    icons: dict = field(default_factory=default_icon_table)
    default_icon: str = f"{ICON_DIR}/default.svg"
    position_store: Optional[str] = None
    output: Optional[str] = None

    def __post_init__(self):
        if self.center is not None:
            if len(self.center) != 2:
                raise ValueError(f"center must be [lat, lon]: {self.center!r}")
            self.lat, self.lon = map(float, self.center)

    def start_point(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lon)

    def bounds_limit(self) -> MapBounds:
        (s, w), (n, e) = self.max_bounds
        return MapBounds.from_corners((n, e), (s, w))

def load_json(path: str | None) -> dict:
    if not path: return {}
    p = Path(path)
    if not p.exists(): raise FileNotFoundError(path)
    with p.open("r", encoding="utf-8") as f: return json.load(f)
