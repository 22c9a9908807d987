# state.py
"""
アクティブマーカー / コンテキストメニューの状態機械。

状態:
  Idle / ViewingMarker(marker) / PlacingPin(position) / ContextMenuOpen(position)

各ジェスチャは完了まで同期的に処理される（遷移が交錯しない）。
権限が足りないジェスチャは無視し、状態は変えない。
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Union

from shelter_map.errors import UnauthorizedGesture
from shelter_map.model.models import ActiveMarker, GeoPoint, LocationMarker, MarkerSource
from shelter_map.viewport.widget import MapWidget
from .collaborators import Collaborators, ContextProvider, GestureContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class ViewingMarker:
    marker: LocationMarker


@dataclass(frozen=True)
class PlacingPin:
    position: GeoPoint


@dataclass(frozen=True)
class ContextMenuOpen:
    position: GeoPoint


State = Union[Idle, ViewingMarker, PlacingPin, ContextMenuOpen]
IDLE = Idle()


class InteractionStateMachine:
    def __init__(
        self,
        widget: MapWidget,
        collaborators: Optional[Collaborators] = None,
        context: Optional[ContextProvider] = None,
    ):
        self.widget = widget
        self.collaborators = collaborators or Collaborators()
        self.context = context or GestureContext
        self.state: State = IDLE

    # --- 参照 ---------------------------------------------------------

    @property
    def active_marker(self) -> Optional[ActiveMarker]:
        s = self.state
        if isinstance(s, ViewingMarker):
            return ActiveMarker(s.marker.position, MarkerSource.EXISTING_MARKER)
        if isinstance(s, (PlacingPin, ContextMenuOpen)):
            return ActiveMarker(s.position, MarkerSource.NEW_PIN)
        return None

    @property
    def context_menu_open(self) -> bool:
        return isinstance(self.state, ContextMenuOpen)

    def popup_visible(self, ctx: Optional[GestureContext] = None) -> bool:
        """「ここにロケーションを追加」ポップアップはモデレータのみ"""
        ctx = ctx or self.context()
        return self.context_menu_open and ctx.is_logged_in and ctx.is_moderator

    # --- 内部 ---------------------------------------------------------

    def _enter(self, state: State, *, pan: bool = False) -> State:
        if state != self.state:
            logger.debug("%s -> %s", type(self.state).__name__, type(state).__name__)
        self.state = state
        if pan:
            active = self.active_marker
            if active is not None:
                self.widget.pan_to(active.position)
        return self.state

    def _ignore(self, gesture: str, reason: str) -> State:
        logger.debug("%s", UnauthorizedGesture(gesture, reason))
        return self.state

    # --- ジェスチャ ---------------------------------------------------

    def marker_click(self, marker: LocationMarker) -> State:
        """既存マーカーのクリック: 詳細パネルを開き、そのマーカーを選択"""
        self.collaborators.notify("open_detail_panel", marker)
        return self._enter(ViewingMarker(marker), pan=True)

    def right_click(self, position: GeoPoint) -> State:
        """地図の右クリック: コンテキストメニューの開閉（ログイン必須、編集モード中は無効）"""
        ctx = self.context()
        if ctx.edit_mode:
            return self.state

        if not ctx.is_logged_in:
            self._ignore("right_click", "not logged in")
        elif self.context_menu_open:
            self._enter(IDLE)
        else:
            self._enter(ContextMenuOpen(position))

        # メニュー操作時は詳細タブを閉じる
        self.collaborators.notify("close_tab")
        return self.state

    def confirm_add(self) -> State:
        """コンテキストメニューの「追加」確定: 追加フォームを開き、その位置に地図を合わせる"""
        if not isinstance(self.state, ContextMenuOpen):
            return self.state
        ctx = self.context()
        if not ctx.is_logged_in:
            return self._ignore("confirm_add", "not logged in")
        if not ctx.is_moderator:
            return self._ignore("confirm_add", "moderator capability required")

        position = self.state.position
        self._enter(PlacingPin(position))
        self.collaborators.notify("open_add_form", position)
        self.widget.set_view(position)
        return self.state

    def map_click(self, position: GeoPoint) -> State:
        ctx = self.context()

        # メニューが開いていれば閉じるだけ
        if self.context_menu_open:
            return self._enter(IDLE)

        if ctx.edit_mode and isinstance(self.state, Idle):
            if not ctx.is_logged_in:
                return self._ignore("map_click", "not logged in")
            # 座標未指定の作成フォーム: クリック位置にピンを置く
            self._enter(PlacingPin(position), pan=True)
            self.collaborators.notify("update_coordinates", position)
            return self.state

        if ctx.is_mobile and ctx.is_location_tab_open and not ctx.edit_mode:
            # 小画面ではミニ地図のクリックで詳細ドロワーを閉じる
            self.collaborators.notify("close_tab")
            return self._enter(IDLE)

        return self.state

    def drag_end(self, position: GeoPoint) -> State:
        """ピンのドラッグ終了（編集モードのみ）"""
        if not isinstance(self.state, PlacingPin):
            return self.state
        if not self.context().edit_mode:
            return self.state
        self._enter(PlacingPin(position))
        self.collaborators.notify("update_coordinates", position)
        return self.state

    # --- 外部コマンド -------------------------------------------------

    def set_active_marker(self, position: Optional[GeoPoint]) -> State:
        """外部からの選択設定。None なら解除"""
        if position is None:
            return self.reset()
        return self._enter(PlacingPin(position), pan=True)

    def reset(self) -> State:
        return self._enter(IDLE)
