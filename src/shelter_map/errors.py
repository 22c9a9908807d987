# errors.py
"""
shelter_map の例外。

- MarkerLoadFailure: 最新のマーカー取得が失敗（表示中のマーカーは維持）
- StaleResponseDiscarded: 古いレスポンスの破棄（内部用、呼び出し側には出さない）
- UnauthorizedGesture: 権限のない操作（無視される）
- LocationDataError: ロケーションJSONの不正
"""
from __future__ import annotations
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from shelter_map.model.models import MapBounds


class ShelterMapError(Exception):
    pass


class MarkerLoadFailure(ShelterMapError):
    def __init__(self, bounds: "MapBounds", cause: Optional[BaseException] = None):
        super().__init__(f"could not load markers for {bounds}: {cause}")
        self.bounds = bounds
        self.cause = cause


class StaleResponseDiscarded(ShelterMapError):
    def __init__(self, seq: int, latest: int):
        super().__init__(f"response #{seq} discarded (latest request is #{latest})")
        self.seq = seq
        self.latest = latest


class UnauthorizedGesture(ShelterMapError):
    def __init__(self, gesture: str, reason: str):
        super().__init__(f"{gesture} ignored: {reason}")
        self.gesture = gesture
        self.reason = reason


class LocationDataError(ShelterMapError):
    pass
