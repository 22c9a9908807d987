# tracker.py
from __future__ import annotations
import logging
from typing import Callable, Optional

from shelter_map.model.models import GeoPoint, MapBounds
from .widget import MapWidget

logger = logging.getLogger(__name__)

SavePosition = Callable[[GeoPoint, float], None]


class ViewportTracker:
    """
    move-settle イベントごとに表示範囲を読み、前回と値で比較する。
    - 同じ範囲: 何もしない（冗長な settle で二重取得しない）
    - 変化あり: last_bounds を更新し、位置を保存して新しい範囲を返す
    """

    def __init__(self, save_position: Optional[SavePosition] = None):
        self.save_position = save_position
        self.last_bounds: Optional[MapBounds] = None

    def settle(self, widget: MapWidget) -> Optional[MapBounds]:
        bounds = widget.get_bounds()
        if bounds == self.last_bounds:
            logger.debug("viewport unchanged, skipping")
            return None

        self.last_bounds = bounds
        if self.save_position is not None:
            self.save_position(widget.get_center(), widget.get_zoom())
        logger.debug("viewport changed: %s", bounds)
        return bounds

    def reset(self) -> None:
        """次の settle を必ず変化ありとして扱う"""
        self.last_bounds = None
