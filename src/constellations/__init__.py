"""Constellations: connectivity clustering of 4D integer points.

Public API:
- Constellations: iterative pairwise-merge clusterer (shatter, merge until stable)
- cluster_points_connected_components: KD-tree + union-find labelling (same partition)
- count_constellations: number of groups by either method
- read_points / load_points: parse line-delimited 'x,y,z,t' records
"""

from .core4d import (
    LINK_THRESHOLD,
    Constellation,
    Constellations,
    cluster_points_connected_components,
    count_constellations,
    labels_to_groups,
    manhattan_distance,
)
from .reader import PointParseError, load_points, parse_point, read_points

__all__ = [
    "LINK_THRESHOLD",
    "Constellation",
    "Constellations",
    "cluster_points_connected_components",
    "count_constellations",
    "labels_to_groups",
    "manhattan_distance",
    "PointParseError",
    "load_points",
    "parse_point",
    "read_points",
]
