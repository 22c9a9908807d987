from __future__ import annotations
import pathlib, json, logging
from typing import Any, Dict, List, Mapping

from jsonschema import ValidationError, validate

from shelter_map.errors import LocationDataError
from .models import GeoPoint, LocationMarker, LocationType

logger = logging.getLogger(__name__)


class LocationLoader:
    """ロケーションJSONを読み込んで LocationMarker に変換する共通ローダ"""

    def __init__(self, validate_schema: bool = True, schema_dir: str | pathlib.Path | None = None):
        self.validate_schema = validate_schema
        # デフォルト: このパッケージの schemas ディレクトリ
        if schema_dir is None:
            self.schema_dir = pathlib.Path(__file__).parent.parent / "schemas"
        else:
            self.schema_dir = pathlib.Path(schema_dir)

    def _load_json(self, path: str | pathlib.Path) -> Any:
        p = pathlib.Path(path)
        if not p.exists():
            raise FileNotFoundError(path)
        with p.open("r", encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise LocationDataError(f"{path}: {e}") from e

    def _validate(self, instance: Any, schema_name: str) -> None:
        if not self.validate_schema:
            return
        schema = self._load_json(self.schema_dir / schema_name)
        try:
            validate(instance=instance, schema=schema)
        except ValidationError as e:
            raise LocationDataError(f"schema validation failed: {e.message}") from e

    # --- 公開API ------------------------------------------------------

    def load_locations(self, path: str | pathlib.Path) -> List[LocationMarker]:
        """locations.json → LocationMarker のリスト"""
        data = self._load_json(path)
        return self.parse_locations(data)

    def parse_locations(self, data: Mapping[str, Any]) -> List[LocationMarker]:
        self._validate(data, "locations.schema.json")

        markers: List[LocationMarker] = []
        seen: set[str] = set()
        for item in data["locations"]:
            m = parse_marker(item)
            if m.id in seen:
                logger.warning("duplicate location id %s, keeping the first one", m.id)
                continue
            seen.add(m.id)
            markers.append(m)
        logger.debug("parsed %d locations", len(markers))
        return markers


def parse_marker(item: Dict[str, Any]) -> LocationMarker:
    """APIのロケーション辞書 ({location: {lat, lon}, waiting_time, ...}) → LocationMarker"""
    try:
        loc = item["location"]
        waiting = item.get("waiting_time")
        return LocationMarker(
            id=str(item["id"]),
            position=GeoPoint(float(loc["lat"]), float(loc["lon"])),
            type=LocationType.parse(str(item["type"])),
            name=item.get("name") or "",
            phone=item.get("phone") or None,
            waiting_time=float(waiting) if waiting is not None else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise LocationDataError(f"invalid location entry {item!r}: {e}") from e
