# cluster.py
"""
マーカーのクラスタリング（描画指示の生成）。

disable_at_zoom 未満では、画面ピクセル上で cluster_radius 以内に近いマーカーを
1つのクラスタにまとめる。グリッド（セル幅 = 半径）に登録したクラスタの起点から
近傍 3x3 セルだけを探索し、最も近いクラスタに加える（貪欲法）。
disable_at_zoom 以上では全マーカーを個別に描画する。
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from shelter_map.model.models import GeoPoint, LocationMarker
from shelter_map.viewport.projection import ScreenProjector
from .icons import IconRef, IconResolver, TableIconResolver

DEFAULT_CLUSTER_RADIUS = 60
DEFAULT_DISABLE_AT_ZOOM = 11
DEFAULT_BADGE_SIZE = 40


@dataclass(frozen=True)
class MarkerEntity:
    marker: LocationMarker
    icon: IconRef
    tooltip: str

    @property
    def position(self) -> GeoPoint:
        return self.marker.position


@dataclass(frozen=True)
class ClusterEntity:
    position: GeoPoint          # 重心
    count: int
    member_ids: Tuple[str, ...]
    badge_size: int = DEFAULT_BADGE_SIZE

    @property
    def label(self) -> str:
        return str(self.count)


RenderEntity = Union[MarkerEntity, ClusterEntity]


def tooltip_for(marker: LocationMarker) -> str:
    if marker.phone:
        return f"{marker.name}\ntel. {marker.phone}"
    return marker.name


def _group_by_radius(px: np.ndarray, radius: float) -> List[List[int]]:
    """(n,2) のピクセル座標 → グループ（インデックスのリスト）のリスト"""
    groups: List[List[int]] = []
    if radius <= 0:
        return [[i] for i in range(len(px))]

    anchors: List[np.ndarray] = []
    grid: Dict[Tuple[int, int], List[int]] = {}
    r2 = radius * radius

    for i, p in enumerate(px):
        cx, cy = int(np.floor(p[0] / radius)), int(np.floor(p[1] / radius))
        best, best_d2 = None, r2
        for gx in (cx - 1, cx, cx + 1):
            for gy in (cy - 1, cy, cy + 1):
                for g in grid.get((gx, gy), ()):
                    d = anchors[g] - p
                    d2 = float(d[0] * d[0] + d[1] * d[1])
                    if d2 <= best_d2:
                        best, best_d2 = g, d2

        if best is not None:
            groups[best].append(i)
        else:
            anchors.append(p)
            groups.append([i])
            grid.setdefault((cx, cy), []).append(len(groups) - 1)

    return groups


def cluster_markers(
    markers: Iterable[LocationMarker],
    zoom: float,
    *,
    cluster_radius: float = DEFAULT_CLUSTER_RADIUS,
    disable_at_zoom: float = DEFAULT_DISABLE_AT_ZOOM,
    resolve_icon: Optional[IconResolver] = None,
    badge_size: int = DEFAULT_BADGE_SIZE,
) -> List[RenderEntity]:
    markers = list(markers)
    resolve = resolve_icon or TableIconResolver()

    def single(m: LocationMarker) -> MarkerEntity:
        return MarkerEntity(m, resolve(m.type, m.waiting_time), tooltip_for(m))

    if zoom >= disable_at_zoom or len(markers) < 2:
        return [single(m) for m in markers]

    lats = np.array([m.position.lat for m in markers])
    lons = np.array([m.position.lon for m in markers])
    px = ScreenProjector(zoom).to_pixels(lats, lons)

    entities: List[RenderEntity] = []
    for members in _group_by_radius(px, cluster_radius):
        if len(members) == 1:
            entities.append(single(markers[members[0]]))
            continue
        centroid = GeoPoint(float(lats[members].mean()), float(lons[members].mean()))
        entities.append(ClusterEntity(
            position=centroid,
            count=len(members),
            member_ids=tuple(markers[i].id for i in members),
            badge_size=badge_size,
        ))
    return entities
