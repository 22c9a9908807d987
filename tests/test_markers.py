import asyncio
import json

import pytest

from shelter_map.errors import MarkerLoadFailure
from shelter_map.markers.cluster import ClusterEntity, MarkerEntity, cluster_markers, tooltip_for
from shelter_map.markers.icons import TableIconResolver
from shelter_map.markers.loader import MarkerLoader
from shelter_map.markers.provider import LocationFileProvider
from shelter_map.model.models import GeoPoint, LocationType, MapBounds

B1 = MapBounds.from_corners((10, 10), (0, 0))
B2 = MapBounds.from_corners((20, 20), (10, 10))


# --- icons -------------------------------------------------------------

def test_icon_resolver_known_and_unknown_types():
    resolve = TableIconResolver()
    assert resolve(LocationType.CABIN).url == "/location-icons/cabin.svg"
    assert resolve("tower", 12).url == "/location-icons/tower.svg"
    assert resolve("igloo").url == "/location-icons/default.svg"
    assert resolve("cave").anchor == (15, 15)


def test_icon_resolver_custom_table():
    resolve = TableIconResolver({"cabin": "/x/cabin.png"}, default="/x/other.png", size=24)
    icon = resolve(LocationType.CABIN)
    assert icon.url == "/x/cabin.png"
    assert icon.size == (24, 24)
    assert resolve(LocationType.SHED).url == "/x/other.png"


# --- clustering --------------------------------------------------------

def test_two_close_markers_cluster_below_threshold(make_marker):
    markers = [make_marker("a", 50.0, 20.0), make_marker("b", 50.001, 20.001)]
    entities = cluster_markers(markers, 7, cluster_radius=60, disable_at_zoom=11)
    assert len(entities) == 1
    cluster = entities[0]
    assert isinstance(cluster, ClusterEntity)
    assert cluster.count == 2
    assert cluster.label == "2"
    assert set(cluster.member_ids) == {"a", "b"}
    assert cluster.position.lat == pytest.approx(50.0005)
    assert cluster.position.lon == pytest.approx(20.0005)


def test_no_clustering_at_threshold(make_marker):
    markers = [make_marker("a", 50.0, 20.0), make_marker("b", 50.001, 20.001)]
    entities = cluster_markers(markers, 11, cluster_radius=60, disable_at_zoom=11)
    assert len(entities) == 2
    assert all(isinstance(e, MarkerEntity) for e in entities)


def test_distant_markers_stay_individual(make_marker):
    markers = [make_marker("a", 50.0, 20.0), make_marker("b", 45.0, 10.0), make_marker("c", 50.0005, 20.0)]
    entities = cluster_markers(markers, 7)
    clusters = [e for e in entities if isinstance(e, ClusterEntity)]
    singles = [e for e in entities if isinstance(e, MarkerEntity)]
    assert len(clusters) == 1 and clusters[0].count == 2
    assert [e.marker.id for e in singles] == ["b"]


def test_zero_radius_disables_grouping(make_marker):
    markers = [make_marker("a", 50.0, 20.0), make_marker("b", 50.0, 20.0)]
    assert len(cluster_markers(markers, 7, cluster_radius=0)) == 2


def test_empty_marker_set():
    assert cluster_markers([], 7) == []


def test_marker_entity_icon_and_tooltip(make_marker):
    m = make_marker("a", 1, 1, type="igloo", name="Igloo", phone="123")
    (e,) = cluster_markers([m], 12)
    assert e.icon.url == "/location-icons/default.svg"
    assert e.tooltip == "Igloo\ntel. 123"
    assert tooltip_for(make_marker("b", 1, 1, name="Wiata")) == "Wiata"


# --- loader ------------------------------------------------------------

def test_loader_replaces_working_set(providers, make_marker):
    StaticProvider, _ = providers
    provider = StaticProvider({B1: [make_marker("a", 5, 5)], B2: [make_marker("b", 15, 15)]})
    loader = MarkerLoader(provider)
    assert asyncio.run(loader.load(B1)) is True
    assert asyncio.run(loader.load(B2)) is True
    assert [m.id for m in loader.markers] == ["b"]
    assert loader.latest_seq == 2


def test_loader_failure_keeps_last_good(providers, make_marker):
    StaticProvider, _ = providers
    provider = StaticProvider({B1: [make_marker("a", 5, 5)], B2: ConnectionError("offline")})
    loader = MarkerLoader(provider)
    asyncio.run(loader.load(B1))
    with pytest.raises(MarkerLoadFailure) as exc:
        asyncio.run(loader.load(B2))
    assert exc.value.bounds == B2
    assert isinstance(exc.value.cause, ConnectionError)
    assert [m.id for m in loader.markers] == ["a"]


def test_loader_discards_out_of_order_response(providers, make_marker):
    _, GatedProvider = providers
    provider = GatedProvider({B1: [make_marker("old", 5, 5)], B2: [make_marker("new", 15, 15)]})
    loader = MarkerLoader(provider)

    async def scenario():
        t1 = asyncio.create_task(loader.load(B1))
        await asyncio.sleep(0)
        t2 = asyncio.create_task(loader.load(B2))
        await asyncio.sleep(0)
        provider.release(B2)
        assert await t2 is True
        provider.release(B1)
        assert await t1 is False

    asyncio.run(scenario())
    assert [m.id for m in loader.markers] == ["new"]


def test_loader_stale_failure_is_silent(providers, make_marker):
    _, GatedProvider = providers
    provider = GatedProvider({B1: RuntimeError("boom"), B2: [make_marker("new", 15, 15)]})
    loader = MarkerLoader(provider)

    async def scenario():
        t1 = asyncio.create_task(loader.load(B1))
        await asyncio.sleep(0)
        t2 = asyncio.create_task(loader.load(B2))
        await asyncio.sleep(0)
        provider.release(B2)
        provider.release(B1)
        return await asyncio.gather(t1, t2)

    assert asyncio.run(scenario()) == [False, True]
    assert [m.id for m in loader.markers] == ["new"]


# --- provider ----------------------------------------------------------

def test_file_provider_filters_by_bounds(tmp_path):
    p = tmp_path / "locations.json"
    p.write_text(json.dumps({"locations": [
        {"id": "in", "type": "cabin", "location": {"lat": 5, "lon": 5}},
        {"id": "out", "type": "shed", "location": {"lat": 15, "lon": 15}},
    ]}), encoding="utf-8")
    provider = LocationFileProvider(p)
    markers = asyncio.run(provider.fetch_markers(B1))
    assert [m.id for m in markers] == ["in"]
    assert markers[0].position == GeoPoint(5, 5)


def test_file_provider_missing_file_surfaces_as_load_failure(tmp_path):
    loader = MarkerLoader(LocationFileProvider(tmp_path / "missing.json"))
    with pytest.raises(MarkerLoadFailure) as exc:
        asyncio.run(loader.load(B1))
    assert isinstance(exc.value.cause, FileNotFoundError)
