"""
Region grouping for the 3D node graph.

Assigns each observation to a coarse region using rough lat/lon boxes,
links every node to a random peer in the same region, and computes the
pinned 3D positions used when nodes are grouped by region.
"""

import math
from typing import Dict, List, Optional, Sequence

import numpy as np

from config import FALLBACK_REGION, REGION_BOXES, REGION_CENTERS
from models.observation import Observation


def closest_region(lat: float, lon: float) -> str:
    """Return the first region whose box contains (lat, lon)."""
    for name, (lat_min, lat_max, lon_min, lon_max) in REGION_BOXES:
        if lat_min <= lat <= lat_max and lon_min <= lon <= lon_max:
            return name
    return FALLBACK_REGION


def build_region_graph(observations: Sequence[Observation], seed: Optional[int] = None) -> dict:
    """Build a node/link graph grouped by region.

    Each observation becomes a node sized by ``log10(concentration + 1)``.
    Each node links to one randomly chosen *other* node of its region;
    nodes alone in their region get no link.

    Returns:
        ``{"nodes": [...], "links": [{"source", "target"}, ...]}``
    """
    rng = np.random.default_rng(seed)
    nodes = []
    by_region: Dict[str, List[str]] = {}
    # Position of each node within its region's member list
    slots: List[int] = []
    for i, obs in enumerate(observations):
        region = closest_region(obs.latitude, obs.longitude)
        node = {
            "id": f"node-{i}",
            "latitude": obs.latitude,
            "longitude": obs.longitude,
            "concentration": obs.concentration,
            "region": region,
            "size": math.log10(obs.concentration + 1.0),
        }
        members = by_region.setdefault(region, [])
        slots.append(len(members))
        members.append(node["id"])
        nodes.append(node)

    links = []
    for node, slot in zip(nodes, slots):
        members = by_region[node["region"]]
        if len(members) < 2:
            continue
        # Draw from the other members without building a peer list
        j = int(rng.integers(len(members) - 1))
        if j >= slot:
            j += 1
        links.append({"source": node["id"], "target": members[j]})
    return {"nodes": nodes, "links": links}


def pin_nodes(nodes: List[dict], grouped: bool, expanded_region: Optional[str] = None) -> List[dict]:
    """Return copies of *nodes* with fixed positions (fx, fy, fz) set.

    When *grouped*, every node is pinned to its region centre except the
    nodes of *expanded_region*, which float free (positions None).
    """
    pinned = []
    for node in nodes:
        copy = dict(node)
        if grouped and node["region"] != expanded_region:
            fx, fy, fz = REGION_CENTERS.get(node["region"], (0, 0, 0))
        else:
            fx = fy = fz = None
        copy.update(fx=fx, fy=fy, fz=fz)
        pinned.append(copy)
    return pinned
