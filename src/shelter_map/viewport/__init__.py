# viewport/__init__.py
"""
Viewport layer: 地図ウィジェットの表示範囲まわり。

- projection: 緯度経度 <-> Web Mercator / 画面ピクセル
- widget: MapWidget プロトコルと HeadlessMap
- tracker: 表示範囲の変化検出
- geolocation: 現在地コントロール
- position_store: 最後の表示位置の保存
"""
__all__ = ["projection", "widget", "tracker", "geolocation", "position_store"]
