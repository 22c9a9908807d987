# cli.py
import argparse, asyncio, logging, sys
from shelter_map.config import MapConfig, load_json
from shelter_map.core import MapController
from shelter_map.interaction.collaborators import Collaborators
from shelter_map.markers.cluster import ClusterEntity
from shelter_map.markers.provider import LocationFileProvider
from shelter_map.model.models import GeoPoint
from shelter_map.viewport.position_store import JsonPositionStore
from shelter_map.viewport.widget import HeadlessMap
from .overlay import TileOverlay
from .renderer import PlotRenderer

CLI_ONLY = ("config", "current_lat", "current_lon", "print_markers", "verbose")

def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="shelter-map")
    p.add_argument("--config")
    p.add_argument("--locations")
    p.add_argument("--lat", type=float)
    p.add_argument("--lon", type=float)
    p.add_argument("--zoom", type=float)
    p.add_argument("--tiles")
    p.add_argument("--overlay-map", dest="overlay_map", action="store_true", default=None)
    p.add_argument("--position-store", dest="position_store")
    p.add_argument("--output", "-o")
    p.add_argument("--current-lat", dest="current_lat", type=float)
    p.add_argument("--current-lon", dest="current_lon", type=float)
    p.add_argument("--print-markers", dest="print_markers", action="store_true")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)

def build_config(args) -> MapConfig:
    cfg_dict = load_json(args.config)
    # JSON の center は lat/lon に展開しておき、--lat/--lon で個別に上書きできるようにする
    if cfg_dict.get("center") is not None:
        center = MapConfig(center=cfg_dict.pop("center"))
        cfg_dict["lat"], cfg_dict["lon"] = center.lat, center.lon
    # JSONをデフォルトに、CLIで上書き
    for k, v in vars(args).items():
        if k in CLI_ONLY: continue
        if v is not None: cfg_dict[k] = v
    return MapConfig(**cfg_dict)

def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    cfg = build_config(args)
    if not cfg.locations:
        print("[ERROR] no locations file given (--locations or config 'locations')", file=sys.stderr)
        return 1

    # 前回の表示位置。--lat/--lon, --zoom が指定された値はそちらを優先
    store = JsonPositionStore(cfg.position_store) if cfg.position_store else None
    center, zoom = cfg.start_point(), cfg.zoom
    saved = store.load_position() if store else None
    if saved:
        saved_center, saved_zoom = saved
        if args.lat is None and args.lon is None:
            center = saved_center
        if args.zoom is None:
            zoom = saved_zoom

    widget = HeadlessMap(center, zoom,
                         width_px=cfg.width_px, height_px=cfg.height_px,
                         min_zoom=cfg.min_zoom, max_zoom=cfg.max_zoom,
                         max_bounds=cfg.bounds_limit())

    current = None
    if args.current_lat is not None and args.current_lon is not None:
        current = GeoPoint(args.current_lat, args.current_lon)

    failures = []
    collaborators = Collaborators(
        save_position=store.save_position if store else None,
        load_failed=failures.append,
    )
    controller = MapController(widget, LocationFileProvider(cfg.locations),
                               config=cfg, collaborators=collaborators,
                               current_location=current)

    asyncio.run(controller.on_move_end())
    if failures:
        print(f"[ERROR] {failures[-1]}", file=sys.stderr)
        return 1

    scene = controller.scene()

    # 標準出力オプション
    if args.print_markers:
        print("# kind,id,count,lat,lon,icon")
        for e in scene.entities:
            if isinstance(e, ClusterEntity):
                print(f"cluster,,{e.count},{e.position.lat:.6f},{e.position.lon:.6f},")
            else:
                print(f"marker,{e.marker.id},1,{e.position.lat:.6f},{e.position.lon:.6f},{e.icon.url}")

    if cfg.output:
        overlay = TileOverlay(cfg.tiles) if cfg.overlay_map else None
        PlotRenderer(overlay).draw(scene, cfg.output)
    return 0

if __name__ == "__main__":
    sys.exit(main())
