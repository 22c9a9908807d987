# renderer.py
from __future__ import annotations
import logging
from typing import Optional

import matplotlib.pyplot as plt

from shelter_map.core import MapScene
from shelter_map.markers.cluster import ClusterEntity, MarkerEntity
from shelter_map.model.models import GeoPoint, LocationType
from shelter_map.viewport.projection import web_mercator
from .overlay import TileOverlay

logger = logging.getLogger(__name__)

PRIMARY = "#2e7d32"
TYPE_ORDER = [t.value for t in LocationType]


def _type_color(type_key: str):
    if type_key not in TYPE_ORDER:
        return "lightgray"
    return plt.cm.tab10(TYPE_ORDER.index(type_key) % 10)


class PlotRenderer:
    """MapScene を matplotlib で静的に描く（座標は Web Mercator [m]）"""

    def __init__(self, overlay: TileOverlay | None = None, figsize=(10, 8), dpi: int = 120):
        self.ov = overlay
        self.figsize = figsize
        self.dpi = dpi

    def _xy(self, p: GeoPoint):
        return web_mercator().lonlat_to_xy(p.lon, p.lat)

    def draw(self, scene: MapScene, output: Optional[str] = None):
        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)

        xmin, ymin = self._xy(scene.bounds.south_west)
        xmax, ymax = self._xy(scene.bounds.north_east)

        # 背景地図
        if self.ov:
            img, extent, z = self.ov.fetch(xmin, ymin, xmax, ymax, scene.zoom)
            logger.debug("basemap z=%d extent=%s", z, extent)
            ax.imshow(img, extent=extent, origin="upper", interpolation="bilinear", zorder=0)

        # マーカー / クラスタ
        for e in scene.entities:
            x, y = self._xy(e.position)
            if isinstance(e, ClusterEntity):
                ax.scatter([x], [y], s=e.badge_size ** 2 * 0.5, facecolor="white",
                           edgecolor=PRIMARY, linewidths=3, zorder=4)
                ax.annotate(e.label, (x, y), ha="center", va="center",
                            fontsize=10, fontweight="bold", color=PRIMARY, zorder=5)
            elif isinstance(e, MarkerEntity):
                ax.plot(x, y, marker="o", markersize=e.icon.size[0] / 4,
                        mec="black", mfc=_type_color(e.marker.type_key), zorder=4)
                if e.marker.name:
                    ax.annotate(e.tooltip, (x, y), xytext=(5, 6), textcoords="offset points",
                                fontsize=7, zorder=5)

        # アクティブマーカー（とコンテキストメニュー）
        if scene.active_marker:
            x, y = self._xy(scene.active_marker.position)
            ax.plot(x, y, marker="v", markersize=10, mec="black",
                    mfc="orange" if scene.active_draggable else "red", zorder=6)
            if scene.popup_visible:
                ax.annotate("Add location here", (x, y),
                            xytext=(0, 18), textcoords="offset points", ha="center",
                            bbox=dict(boxstyle="round,pad=0.3", fc="white", ec="gray", alpha=0.9),
                            zorder=8)

        # 現在地
        if scene.current_location:
            x, y = self._xy(scene.current_location)
            ax.plot(x, y, marker="o", markersize=7, mec="white", mfc="royalblue", zorder=7)

        if scene.controls_visible:
            ax.text(0.99, 0.99, f"GPS: {scene.geolocation}", transform=ax.transAxes,
                    ha="right", va="top", fontsize=8,
                    alpha=1.0 if scene.current_location else 0.67)

        ax.set_xlim(xmin, xmax)
        ax.set_ylim(ymin, ymax)
        ax.set_aspect("equal", adjustable="box")
        ax.set_axis_off()
        ax.set_title(f"({scene.center.lat:.4f}, {scene.center.lon:.4f}) z={scene.zoom:g}", fontsize=9)
        plt.tight_layout()

        if output:
            fig.savefig(output, dpi=self.dpi)
            plt.close(fig)
            logger.info("map written to %s", output)
        else:
            plt.show()
        return fig
