# core.py
"""
地図インタラクションのコア (MapController)
-----------------------------------
ViewportTracker / MarkerLoader / クラスタリング / 状態機械 / 現在地コントロール
を1つずつ保持し、地図ウィジェットのイベントを振り分ける。

イベント:
  on_move_end / on_click / on_right_click / on_marker_click / on_drag_end
コマンド:
  set_active_marker / reload / focus / recenter / on_layout_change / scene
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional

from shelter_map.config import MapConfig
from shelter_map.errors import MarkerLoadFailure
from shelter_map.interaction.collaborators import Collaborators, ContextProvider, GestureContext
from shelter_map.interaction.state import InteractionStateMachine, State
from shelter_map.markers.cluster import RenderEntity, cluster_markers
from shelter_map.markers.icons import ACTIVE_MARKER_ICON, CURRENT_LOCATION_ICON, IconRef, IconResolver, TableIconResolver
from shelter_map.markers.loader import MarkerLoader
from shelter_map.markers.provider import DataProvider
from shelter_map.model.models import ActiveMarker, GeoPoint, LocationMarker, MapBounds
from shelter_map.viewport.geolocation import GeolocationControl
from shelter_map.viewport.tracker import ViewportTracker
from shelter_map.viewport.widget import MapWidget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapScene:
    """1回の描画パスぶんの描画指示"""
    center: GeoPoint
    zoom: float
    bounds: MapBounds
    entities: List[RenderEntity]
    active_marker: Optional[ActiveMarker]
    active_draggable: bool
    active_icon: IconRef
    popup_visible: bool
    current_location: Optional[GeoPoint]
    current_location_icon: IconRef
    geolocation: str
    controls_visible: bool


class MapController:
    def __init__(
        self,
        widget: MapWidget,
        provider: DataProvider,
        *,
        config: Optional[MapConfig] = None,
        collaborators: Optional[Collaborators] = None,
        context: Optional[ContextProvider] = None,
        resolve_icon: Optional[IconResolver] = None,
        current_location: Optional[GeoPoint] = None,
    ):
        self.config = config or MapConfig()
        self.widget = widget
        self.collaborators = collaborators or Collaborators()
        self.context = context or GestureContext
        self.resolve_icon = resolve_icon or TableIconResolver(
            self.config.icons, self.config.default_icon, self.config.marker_icon_size)

        self.tracker = ViewportTracker(save_position=self._save_position)
        self.loader = MarkerLoader(provider)
        self.interaction = InteractionStateMachine(widget, self.collaborators, self.context)
        self.geolocation = GeolocationControl(current_location)

    # --- 参照 ---------------------------------------------------------

    @property
    def markers(self) -> List[LocationMarker]:
        return self.loader.markers

    @property
    def state(self) -> State:
        return self.interaction.state

    # --- 表示範囲 / 読み込み -------------------------------------------

    def _save_position(self, center: GeoPoint, zoom: float) -> None:
        self.collaborators.notify("save_position", center, zoom)

    async def on_move_end(self) -> bool:
        """
        move-settle イベント。範囲が本当に変わった時だけ取得する。
        Returns: 新しいマーカー集合を適用したら True
        """
        bounds = self.tracker.settle(self.widget)
        if bounds is None:
            return False
        try:
            return await self.loader.load(bounds)
        except MarkerLoadFailure as e:
            # 直前のマーカーを表示したまま、呼び出し側に通知する
            logger.warning("%s", e)
            self.collaborators.notify("load_failed", e)
            return False

    async def reload(self, force: bool = False) -> bool:
        if force:
            self.tracker.reset()
        return await self.on_move_end()

    # --- ジェスチャ ---------------------------------------------------

    def on_click(self, position: GeoPoint) -> State:
        return self.interaction.map_click(position)

    def on_right_click(self, position: GeoPoint) -> State:
        return self.interaction.right_click(position)

    def on_marker_click(self, marker: LocationMarker) -> State:
        return self.interaction.marker_click(marker)

    def on_drag_end(self, position: GeoPoint) -> State:
        return self.interaction.drag_end(position)

    def confirm_add(self) -> State:
        return self.interaction.confirm_add()

    # --- コマンド -----------------------------------------------------

    def set_active_marker(self, position: Optional[GeoPoint]) -> State:
        return self.interaction.set_active_marker(position)

    def reset(self) -> State:
        return self.interaction.reset()

    def focus(self, center: GeoPoint) -> bool:
        """外部から与えられた中心へ移動（選択中のマーカーがある間は動かさない）"""
        if self.interaction.active_marker is not None:
            return False
        self.widget.fly_to(center)
        return True

    def set_current_position(self, position: Optional[GeoPoint]) -> None:
        self.geolocation.set_current_position(position)

    def recenter(self) -> bool:
        return self.geolocation.recenter(self.widget)

    def on_layout_change(self, width_px: Optional[int] = None, height_px: Optional[int] = None) -> bool:
        """詳細タブの開閉などでレイアウトが変わった時。小画面のみサイズを再計算"""
        if not self.context().is_mobile:
            return False
        self.widget.invalidate_size(width_px, height_px)
        return True

    # --- 描画 ---------------------------------------------------------

    def scene(self) -> MapScene:
        ctx = self.context()
        zoom = self.widget.get_zoom()
        active = self.interaction.active_marker
        return MapScene(
            center=self.widget.get_center(),
            zoom=zoom,
            bounds=self.widget.get_bounds(),
            entities=cluster_markers(
                self.markers, zoom,
                cluster_radius=self.config.cluster_radius,
                disable_at_zoom=self.config.disable_clustering_at_zoom,
                resolve_icon=self.resolve_icon,
                badge_size=self.config.cluster_icon_size,
            ),
            active_marker=active,
            active_draggable=bool(active and active.is_draggable(ctx.edit_mode)),
            active_icon=ACTIVE_MARKER_ICON,
            popup_visible=self.interaction.popup_visible(ctx),
            current_location=self.geolocation.current,
            current_location_icon=CURRENT_LOCATION_ICON,
            geolocation=self.geolocation.affordance,
            controls_visible=not (ctx.is_mobile and ctx.is_location_tab_open),
        )
