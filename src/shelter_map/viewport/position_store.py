# position_store.py
from __future__ import annotations
import json, logging
from pathlib import Path
from typing import Optional, Tuple

from shelter_map.model.models import GeoPoint

logger = logging.getLogger(__name__)


class JsonPositionStore:
    """最後に見ていた地図位置を JSON ファイルに保存する"""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def save_position(self, center: GeoPoint, zoom: float) -> None:
        # fire-and-forget: 書き込み失敗で地図操作を止めない
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump({"lat": center.lat, "lon": center.lon, "zoom": zoom}, f)
        except OSError as e:
            logger.warning("could not store map position to %s: %s", self.path, e)

    def load_position(self) -> Optional[Tuple[GeoPoint, float]]:
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as f:
                d = json.load(f)
            return GeoPoint(float(d["lat"]), float(d["lon"])), float(d["zoom"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("ignoring unreadable position file %s: %s", self.path, e)
            return None
