# collaborators.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from shelter_map.errors import MarkerLoadFailure
from shelter_map.model.models import GeoPoint, LocationMarker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GestureContext:
    """ジェスチャ時点での権限・モード。毎回呼び出し側から取得し、キャッシュしない"""
    is_logged_in: bool = False
    is_moderator: bool = False
    edit_mode: bool = False
    is_mobile: bool = False
    is_location_tab_open: bool = False


ContextProvider = Callable[[], GestureContext]


@dataclass
class Collaborators:
    """
    外部への通知スロット。いずれも一方向で、戻り値は待たない。
    未設定(None)のスロットは読み飛ばす。
    """
    open_detail_panel: Optional[Callable[[LocationMarker], Any]] = None
    open_add_form: Optional[Callable[[GeoPoint], Any]] = None
    update_coordinates: Optional[Callable[[GeoPoint], Any]] = None
    close_tab: Optional[Callable[[], Any]] = None
    save_position: Optional[Callable[[GeoPoint, float], Any]] = None
    load_failed: Optional[Callable[[MarkerLoadFailure], Any]] = None

    def notify(self, slot: str, *args: Any) -> None:
        fn = getattr(self, slot)
        if fn is None:
            logger.debug("no collaborator for %s", slot)
            return
        logger.debug("notify %s%r", slot, args)
        fn(*args)
