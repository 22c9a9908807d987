# overlay.py
from dataclasses import dataclass
import numpy as np
import contextily as ctx

from shelter_map.viewport.projection import INITIAL_RES

@dataclass(frozen=True)
class TileOverlay:
    tiles: str = "OpenStreetMap.Mapnik"
    max_px: int = 8192

    def provider(self):
        """'OpenStreetMap.Mapnik' 形式なら contextily.providers を辿る。URL はそのまま"""
        if "://" in self.tiles:
            return self.tiles
        prov = ctx.providers
        for name in filter(None, self.tiles.split(".")):
            prov = getattr(prov, name)
        return prov

    def tile_zoom(self, width_m: float, zoom: float, provider) -> int:
        """
        地図のズームを provider の範囲に丸め、
        貼り合わせ画像の横幅が max_px を超えない段まで落とす。
        """
        z = int(np.clip(round(zoom),
                        getattr(provider, "min_zoom", 0),
                        getattr(provider, "max_zoom", 22)))
        if width_m > 0:
            # 横幅 [px] = width_m / (INITIAL_RES / 2^z) <= max_px
            z_fit = int(np.floor(np.log2(self.max_px * INITIAL_RES / width_m)))
            z = max(0, min(z, z_fit))
        return z

    def fetch(self, Xmin, Ymin, Xmax, Ymax, zoom: float):
        """Web Mercator (m) の範囲の背景タイルを貼り合わせて返す"""
        provider = self.provider()
        z = self.tile_zoom(Xmax - Xmin, zoom, provider)
        img, extent_wm = ctx.bounds2img(Xmin, Ymin, Xmax, Ymax, source=provider, zoom=z, ll=False)
        return img, extent_wm, z
