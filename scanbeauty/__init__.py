"""ScanBeauty: skincare quiz funnel with a rules-based product recommender."""

__version__ = "0.1.0"
