# visualizer2d/__init__.py
"""
2D visualizer: MapScene を matplotlib + contextily で静的に描画する。

- overlay: 背景タイル
- renderer: PlotRenderer
- cli: shelter-map コマンド
"""
__all__ = ["overlay", "renderer", "cli"]
