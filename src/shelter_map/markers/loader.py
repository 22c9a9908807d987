# loader.py
from __future__ import annotations
import logging
from typing import List

from shelter_map.errors import MarkerLoadFailure, StaleResponseDiscarded
from shelter_map.model.models import LocationMarker, MapBounds
from .provider import DataProvider

logger = logging.getLogger(__name__)


class MarkerLoader:
    """
    表示範囲ごとにデータ提供者へ1回だけ問い合わせ、作業用マーカー集合を丸ごと置き換える。

    リクエストには単調増加の通し番号を振り、最新番号のレスポンスだけを適用する。
    追い越された古いレスポンスは成功・失敗とも黙って捨てる（キャンセルはしない）。
    """

    def __init__(self, provider: DataProvider):
        self.provider = provider
        self.markers: List[LocationMarker] = []
        self._seq = 0

    @property
    def latest_seq(self) -> int:
        return self._seq

    def _is_stale(self, seq: int) -> bool:
        if seq == self._seq:
            return False
        logger.debug("%s", StaleResponseDiscarded(seq, self._seq))
        return True

    async def load(self, bounds: MapBounds) -> bool:
        """
        bounds のマーカーを取得する。
        Returns: 結果を適用したら True、古いレスポンスとして破棄したら False
        Raises: MarkerLoadFailure（最新リクエストの失敗。markers は変更しない）
        """
        self._seq += 1
        seq = self._seq
        logger.debug("fetch #%d for %s", seq, bounds)

        try:
            result = await self.provider.fetch_markers(bounds)
        except Exception as e:
            if self._is_stale(seq):
                return False
            raise MarkerLoadFailure(bounds, e) from e

        if self._is_stale(seq):
            return False

        self.markers = list(result)
        logger.info("fetch #%d applied: %d markers", seq, len(self.markers))
        return True
