"""KCQL Export module - result graph renderings."""

from kcql.export.dot import export_dot

__all__ = [
    "export_dot",
]
