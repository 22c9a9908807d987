# markers/__init__.py
"""
Markers layer: マーカーの取得と描画指示。

- provider: DataProvider プロトコルと LocationFileProvider
- loader: MarkerLoader（通し番号で古いレスポンスを破棄）
- cluster: ClusterEntity / MarkerEntity の生成
- icons: 種別 → アイコン
"""
__all__ = ["provider", "loader", "cluster", "icons"]
