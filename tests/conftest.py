import asyncio

import matplotlib
matplotlib.use("Agg")

import pytest

from shelter_map.interaction.collaborators import Collaborators, GestureContext
from shelter_map.model.models import GeoPoint, LocationMarker, LocationType, MapBounds


class StubWidget:
    """境界を直接差し替えられる地図ウィジェット"""

    def __init__(self, bounds=None, center=GeoPoint(0.0, 0.0), zoom=12):
        self.bounds = bounds
        self.center = center
        self.zoom = zoom
        self.calls = []

    def pan_to(self, p):
        self.calls.append(("pan_to", p))
        self.center = p

    def fly_to(self, p, zoom=None):
        self.calls.append(("fly_to", p))
        self.center = p

    def set_view(self, p, zoom=None):
        self.calls.append(("set_view", p))
        self.center = p

    def get_bounds(self):
        return self.bounds

    def get_center(self):
        return self.center

    def get_zoom(self):
        return self.zoom

    def invalidate_size(self, width_px=None, height_px=None):
        self.calls.append(("invalidate_size", width_px, height_px))


class StaticProvider:
    def __init__(self, responses=None, default=None):
        self.responses = responses or {}
        self.default = default or []
        self.calls = []

    async def fetch_markers(self, bounds):
        self.calls.append(bounds)
        r = self.responses.get(bounds, self.default)
        if isinstance(r, Exception):
            raise r
        return r


class GatedProvider:
    """release(bounds) されるまで応答を返さない"""

    def __init__(self, responses):
        self.responses = responses
        self.gates = {}

    def _gate(self, bounds):
        if bounds not in self.gates:
            self.gates[bounds] = asyncio.Event()
        return self.gates[bounds]

    async def fetch_markers(self, bounds):
        await self._gate(bounds).wait()
        r = self.responses[bounds]
        if isinstance(r, Exception):
            raise r
        return r

    def release(self, bounds):
        self._gate(bounds).set()


class Recorder:
    def __init__(self):
        self.events = []
        self.collaborators = Collaborators(
            open_detail_panel=lambda m: self.events.append(("open_detail_panel", m)),
            open_add_form=lambda p: self.events.append(("open_add_form", p)),
            update_coordinates=lambda p: self.events.append(("update_coordinates", p)),
            close_tab=lambda: self.events.append(("close_tab",)),
            save_position=lambda c, z: self.events.append(("save_position", c, z)),
            load_failed=lambda e: self.events.append(("load_failed", e)),
        )

    def names(self):
        return [e[0] for e in self.events]


class MutableContext:
    """ジェスチャ時に毎回読まれる権限フラグ"""

    def __init__(self, **flags):
        self.ctx = GestureContext(**flags)

    def set(self, **flags):
        self.ctx = GestureContext(**flags)

    def __call__(self):
        return self.ctx


@pytest.fixture
def stub_widget():
    return StubWidget()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def context():
    return MutableContext()


@pytest.fixture
def providers():
    return StaticProvider, GatedProvider


@pytest.fixture
def bounds():
    def make(ne, sw):
        return MapBounds.from_corners(ne, sw)
    return make


@pytest.fixture
def make_marker():
    def make(id, lat, lon, type=LocationType.CABIN, **kw):
        return LocationMarker(id=id, position=GeoPoint(lat, lon), type=type, **kw)
    return make
