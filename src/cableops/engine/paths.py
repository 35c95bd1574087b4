"""Reachability and shortest-path queries.

Both work on raw device connectivity: every usable connection counts,
regardless of segment viability or VLANs.
"""

import networkx as nx

from cableops.engine.view import TopologyView


def reachable_from(view: TopologyView, device_id: str) -> set[str]:
    """Devices reachable from a device, always including the device itself."""
    graph = view.device_graph()
    if device_id not in graph:
        return {device_id}
    return set(nx.node_connected_component(graph, device_id))


def shortest_path(
    view: TopologyView,
    from_id: str,
    to_id: str,
    graph: nx.MultiGraph | None = None,
) -> list[str] | None:
    """Find a shortest path by hop count.

    Args:
        view: Topology view of the current snapshot
        from_id: Start device
        to_id: Target device
        graph: Restrict the search to this graph (defaults to the full
            device graph)

    Returns:
        Device ids from start to target, `[from_id]` when they are the
        same device, or None when the target is unreachable. Ties between
        equally short paths are broken arbitrarily.
    """
    if from_id == to_id:
        return [from_id]
    if graph is None:
        graph = view.device_graph()
    try:
        return nx.shortest_path(graph, from_id, to_id)
    except (nx.NetworkXNoPath, nx.NodeNotFound):
        return None


def connections_between(graph: nx.MultiGraph, a: str, b: str) -> list[str]:
    """Ids of the connections linking two adjacent devices in a graph."""
    edges = graph.get_edge_data(a, b)
    return list(edges) if edges else []
