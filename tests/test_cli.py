import json

import pytest

from shelter_map.config import MapConfig
from shelter_map.model.models import GeoPoint
from shelter_map.visualizer2d.cli import build_config, main, parse_args


def _locations(tmp_path):
    p = tmp_path / "locations.json"
    p.write_text(json.dumps({"locations": [
        {"id": "a", "name": "Chatka", "type": "cabin", "location": {"lat": 49.6, "lon": 20.0}},
        {"id": "b", "name": "Wiata", "type": "shed", "location": {"lat": 49.601, "lon": 20.001}},
        {"id": "c", "name": "Źródło", "type": "waterSource", "location": {"lat": 50.5, "lon": 22.0}},
    ]}), encoding="utf-8")
    return p


def test_cli_overrides_json_config(tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(json.dumps({"zoom": 9, "cluster_radius": 40, "locations": "x.json"}), encoding="utf-8")
    cfg = build_config(parse_args(["--config", str(cfg_path), "--zoom", "12"]))
    assert cfg.zoom == 12
    assert cfg.cluster_radius == 40
    assert cfg.locations == "x.json"
    assert cfg.overlay_map is False


def test_cli_prints_clustered_markers(tmp_path, capsys):
    rc = main(["--locations", str(_locations(tmp_path)), "--print-markers"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "cluster,,2," in out
    assert "marker,c,1,50.500000,22.000000,/location-icons/waterSource.svg" in out


def test_cli_writes_png_and_position(tmp_path):
    out = tmp_path / "map.png"
    store = tmp_path / "position.json"
    rc = main(["--locations", str(_locations(tmp_path)), "--output", str(out),
               "--position-store", str(store), "--current-lat", "49.7", "--current-lon", "20.1"])
    assert rc == 0
    assert out.exists() and out.stat().st_size > 0
    saved = json.loads(store.read_text(encoding="utf-8"))
    assert saved["zoom"] == 7


def test_cli_restores_saved_position(tmp_path, capsys):
    store = tmp_path / "position.json"
    store.write_text(json.dumps({"lat": 50.5, "lon": 22.0, "zoom": 12}), encoding="utf-8")
    rc = main(["--locations", str(_locations(tmp_path)), "--position-store", str(store), "--print-markers"])
    assert rc == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("marker,c,1,")


def test_cli_without_locations_fails(capsys):
    assert main([]) == 1
    assert "no locations" in capsys.readouterr().err


def test_cli_reports_load_failure(tmp_path, capsys):
    assert main(["--locations", str(tmp_path / "missing.json")]) == 1
    assert "could not load markers" in capsys.readouterr().err


def test_cli_explicit_zoom_wins_over_saved_position(tmp_path):
    store = tmp_path / "position.json"
    store.write_text(json.dumps({"lat": 50.5, "lon": 22.0, "zoom": 6}), encoding="utf-8")
    rc = main(["--locations", str(_locations(tmp_path)), "--position-store", str(store), "--zoom", "14"])
    assert rc == 0
    # 中心は保存値、ズームは --zoom
    saved = json.loads(store.read_text(encoding="utf-8"))
    assert saved["zoom"] == 14
    assert (saved["lat"], saved["lon"]) == (50.5, 22.0)


def test_cli_explicit_center_keeps_saved_zoom(tmp_path):
    store = tmp_path / "position.json"
    store.write_text(json.dumps({"lat": 50.5, "lon": 22.0, "zoom": 12}), encoding="utf-8")
    rc = main(["--locations", str(_locations(tmp_path)), "--position-store", str(store),
               "--lat", "49.6", "--lon", "20.0"])
    assert rc == 0
    saved = json.loads(store.read_text(encoding="utf-8"))
    assert saved["zoom"] == 12
    assert (saved["lat"], saved["lon"]) == (49.6, 20.0)


def test_config_center_sets_start_point(tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(json.dumps({"center": [50.0, 20.0]}), encoding="utf-8")
    cfg = build_config(parse_args(["--config", str(cfg_path)]))
    assert (cfg.lat, cfg.lon) == (50.0, 20.0)

    # --lat だけ上書きしても経度は center のまま
    cfg = build_config(parse_args(["--config", str(cfg_path), "--lat", "51.0"]))
    assert (cfg.lat, cfg.lon) == (51.0, 20.0)


def test_map_config_center():
    assert MapConfig(center=[1, 2]).start_point() == GeoPoint(1.0, 2.0)
    with pytest.raises(ValueError):
        MapConfig(center=[1.0])
