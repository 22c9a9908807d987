# geolocation.py
from __future__ import annotations
import logging
from typing import Optional

from shelter_map.model.models import GeoPoint
from .widget import MapWidget

logger = logging.getLogger(__name__)

FIXED = "fixed"
NOT_FIXED = "not-fixed"


class GeolocationControl:
    """
    現在地の有無と「現在地へ戻る」操作。
    位置の取得自体は外部（ブラウザ等）の責務で、ここでは値を保持するだけ。
    """

    def __init__(self, current: Optional[GeoPoint] = None):
        self.current = current

    def set_current_position(self, p: Optional[GeoPoint]) -> None:
        self.current = p

    @property
    def available(self) -> bool:
        return self.current is not None

    @property
    def affordance(self) -> str:
        return FIXED if self.available else NOT_FIXED

    def recenter(self, widget: MapWidget) -> bool:
        if self.current is None:
            logger.debug("recenter ignored: current position unknown")
            return False
        widget.fly_to(self.current)
        return True
