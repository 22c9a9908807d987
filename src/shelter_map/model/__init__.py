# model/__init__.py
"""
Model layer: 地図上の値オブジェクトとロケーションJSONのローダ。

- models: GeoPoint / MapBounds / LocationMarker / ActiveMarker
- loader: locations.json → LocationMarker
"""
__all__ = ["models", "loader"]
