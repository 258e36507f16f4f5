from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

import numpy as np
import pandas as pd
from scipy.spatial import cKDTree

# Fixed linking distance (Manhattan) between two points of one constellation.
LINK_THRESHOLD = 3

COORD_COLS = ("x", "y", "z", "t")

METHODS = ("merge", "union-find")


def as_points(points) -> np.ndarray:
    """Coerce an array-like of 4-tuples into a read-only (N, 4) int64 array."""
    arr = np.asarray(points, dtype=np.int64)
    if arr.size == 0:
        arr = np.zeros((0, len(COORD_COLS)), dtype=np.int64)
    if arr.ndim != 2 or arr.shape[1] != len(COORD_COLS):
        raise ValueError(f"points must have shape (N, 4), got {arr.shape}")
    arr = arr.copy()
    arr.setflags(write=False)
    return arr


def _check_threshold(threshold) -> int:
    threshold = int(threshold)
    if threshold < 0:
        raise ValueError(f"threshold must be >= 0, got {threshold}")
    return threshold


def manhattan_distance(p, q) -> int:
    """L1 distance between two 4D points."""
    a = np.asarray(p, dtype=np.int64)
    b = np.asarray(q, dtype=np.int64)
    if a.shape != (len(COORD_COLS),) or b.shape != (len(COORD_COLS),):
        raise ValueError(f"points must have shape (4,), got {a.shape} and {b.shape}")
    return int(np.abs(a - b).sum())


# =============================================================================
# 1) GROUPS
# =============================================================================

@dataclass(eq=False)
class Constellation:
    """
    A group of points that are transitively within the link threshold.

    `members` are row indices into the point table the group was shattered
    from; `points` holds the matching coordinates (same order).
    """
    members: np.ndarray
    points: np.ndarray

    def __len__(self) -> int:
        return int(self.members.shape[0])

    def join(self, other: "Constellation") -> None:
        self.members = np.concatenate([self.members, other.members])
        self.points = np.vstack([self.points, other.points])

    def is_point_connected(self, point, threshold: int = LINK_THRESHOLD) -> bool:
        d = np.abs(self.points - np.asarray(point, dtype=np.int64)).sum(axis=1)
        return bool(np.any(d <= threshold))

    def is_connected(self, other: "Constellation", threshold: int = LINK_THRESHOLD) -> bool:
        for p in other.points:
            if self.is_point_connected(p, threshold):
                return True
        return False


# =============================================================================
# 2) MERGE LOOP
# =============================================================================

class Constellations:
    """
    Iterative merge clusterer over 4D integer points.

    Core idea:
      1) Shatter every point into its own singleton group.
      2) Scan group pairs (i < j, ascending) and merge the first connected pair.
      3) Restart the scan; stop once a full pass finds nothing to merge.

    The fixed point is the transitive closure of "Manhattan distance <= threshold",
    so the final partition does not depend on which connected pair is merged first.
    Cost is O(g^3) pair checks in the worst case, which is fine for the small inputs
    this targets. Use `cluster_points_connected_components` for larger sets.
    """

    def __init__(self, points, *, threshold: int = LINK_THRESHOLD) -> None:
        self.points = as_points(points)
        self.threshold = _check_threshold(threshold)
        self.groups: List[Constellation] = []
        self.n_merges = 0
        self.shatter_all()

    def __len__(self) -> int:
        return len(self.groups)

    def shatter_all(self) -> None:
        """Reset to one singleton group per input point."""
        self.groups = [
            Constellation(members=np.array([k], dtype=np.int64), points=self.points[k:k + 1])
            for k in range(self.points.shape[0])
        ]
        self.n_merges = 0

    def find_connected_pair(self) -> Optional[Tuple[int, int]]:
        n = len(self.groups)
        for i in range(n):
            for j in range(i + 1, n):
                if self.groups[i].is_connected(self.groups[j], self.threshold):
                    return i, j
        return None

    def merge(self, i: int, j: int) -> None:
        """Move every point of group j into group i and drop group j."""
        n = len(self.groups)
        if not (0 <= i < n and 0 <= j < n):
            raise IndexError(f"group indices ({i}, {j}) out of range for {n} groups")
        if i == j:
            raise ValueError("cannot merge a group with itself")
        other = self.groups.pop(j)
        if i > j:
            i -= 1
        self.groups[i].join(other)
        self.n_merges += 1

    def step(self) -> bool:
        """Merge the first connected pair. False means the partition is stable."""
        pair = self.find_connected_pair()
        if pair is None:
            return False
        self.merge(*pair)
        return True

    def is_stable(self) -> bool:
        return self.find_connected_pair() is None

    def run(self, *, verbose: bool = False) -> int:
        """Merge until stable; return the number of constellations."""
        n0 = len(self.groups)
        while self.step():
            pass
        if verbose:
            print(f"[info] merge: {n0} points -> {len(self.groups)} constellations "
                  f"({self.n_merges} merges, threshold={self.threshold})", file=sys.stderr)
        return len(self.groups)

    # ---------------------------------------------------------------------
    # Views on the current partition
    # ---------------------------------------------------------------------
    def labels(self) -> np.ndarray:
        """Per-point label in 0..K-1, groups numbered by their smallest member."""
        labels = -np.ones(self.points.shape[0], dtype=int)
        ordered = sorted(self.groups, key=lambda g: int(g.members.min()))
        for lab, g in enumerate(ordered):
            labels[g.members] = lab
        return labels

    def groups_as_sets(self) -> Set[FrozenSet[int]]:
        return {frozenset(int(m) for m in g.members) for g in self.groups}

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(self.points, columns=list(COORD_COLS))
        df["constellation"] = self.labels()
        return df


# =============================================================================
# 3) UNION-FIND PATH
# =============================================================================

def cluster_points_connected_components(points, *, threshold: int = LINK_THRESHOLD) -> np.ndarray:
    """
    Connected components on the Manhattan distance graph.

    Returns an integer array with one label per point, 0..K-1 in order of
    first appearance. Produces the same partition as `Constellations.run()`.
    """
    pts = as_points(points)
    threshold = _check_threshold(threshold)
    n = pts.shape[0]
    if n == 0:
        return np.zeros(0, dtype=int)

    # p=1 -> Manhattan metric; query_pairs includes pairs at exactly r
    tree = cKDTree(pts.astype(float))
    pairs = tree.query_pairs(r=float(threshold), p=1)

    parent = np.arange(n, dtype=int)

    def find(a: int) -> int:
        while parent[a] != a:
            parent[a] = parent[parent[a]]
            a = parent[a]
        return a

    def union(a: int, b: int) -> None:
        ra, rb = find(a), find(b)
        if ra != rb:
            parent[rb] = ra

    for i, j in pairs:
        union(i, j)

    labels = np.zeros(n, dtype=int)
    roots: Dict[int, int] = {}
    for i in range(n):
        r = find(i)
        if r not in roots:
            roots[r] = len(roots)
        labels[i] = roots[r]
    return labels


def labels_to_groups(labels) -> Dict[int, List[int]]:
    """Map label -> list of point indices carrying it."""
    groups: Dict[int, List[int]] = {}
    for idx, lab in enumerate(np.asarray(labels, dtype=int)):
        groups.setdefault(int(lab), []).append(idx)
    return groups


def count_constellations(points, *, threshold: int = LINK_THRESHOLD, method: str = "merge") -> int:
    if method == "merge":
        return Constellations(points, threshold=threshold).run()
    if method == "union-find":
        labels = cluster_points_connected_components(points, threshold=threshold)
        return int(len(np.unique(labels)))
    raise ValueError(f"method must be one of {METHODS}, got {method!r}")
