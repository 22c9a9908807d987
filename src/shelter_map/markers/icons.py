# icons.py
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, Tuple, Union

from shelter_map.model.models import LocationType

ICON_DIR = "/location-icons"


@dataclass(frozen=True)
class IconRef:
    url: str
    size: Tuple[int, int] = (30, 30)
    anchor: Tuple[int, int] = (15, 15)


ACTIVE_MARKER_ICON = IconRef(f"{ICON_DIR}/point.svg")
CURRENT_LOCATION_ICON = IconRef(f"{ICON_DIR}/current.svg", (24, 24), (12, 12))


class IconResolver(Protocol):
    def __call__(self, type: Union[LocationType, str], waiting_time: Optional[float] = None) -> IconRef: ...


def default_icon_table() -> dict:
    return {t.value: f"{ICON_DIR}/{t.value}.svg" for t in LocationType}


class TableIconResolver:
    """
    種別 → アイコンURL の表引き。未知の種別は default を返す（全域関数）。
    waiting_time は表の鍵には使わないが、差し替え用リゾルバのために受け取る。
    """

    def __init__(self, table: Optional[Mapping[str, str]] = None,
                 default: str = f"{ICON_DIR}/default.svg", size: int = 30):
        self.table = dict(default_icon_table() if table is None else table)
        self.default = default
        self.size = size

    def __call__(self, type: Union[LocationType, str], waiting_time: Optional[float] = None) -> IconRef:
        key = type.value if isinstance(type, LocationType) else str(type)
        url = self.table.get(key, self.default)
        half = self.size // 2
        return IconRef(url, (self.size, self.size), (half, half))
