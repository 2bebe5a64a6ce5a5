"""Graph analytics: read-only queries over a built :class:`LinkGraph`."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Optional

from vault_graph.constants import MIN_CLUSTER_SIZE
from vault_graph.data_models import LinkGraph, NoteIdentity, NoteNode, TagCluster


def find_orphans(graph: LinkGraph) -> list[NoteNode]:
    """Notes with no incoming and no outgoing connections, in path order.

    A note that only links to itself is an orphan.
    """
    return [node for identity, node in sorted(graph.nodes.items()) if graph.degree(identity) == 0]


def most_connected(graph: LinkGraph, limit: Optional[int] = None) -> list[tuple[NoteNode, int]]:
    """Rank notes by degree (in + out), highest first, ties in path order.

    Args:
        graph: Graph to rank.
        limit: Maximum number of entries; all notes when ``None``.

    Raises:
        ValueError: If ``limit`` is negative.
    """
    if limit is not None and limit < 0:
        raise ValueError("limit must not be negative")

    ranked = sorted(
        ((node, graph.degree(identity)) for identity, node in graph.nodes.items()),
        key=lambda item: (-item[1], item[0].id.path),
    )
    return ranked if limit is None else ranked[:limit]


def find_clusters(graph: LinkGraph, min_size: int = MIN_CLUSTER_SIZE) -> list[TagCluster]:
    """Group notes by shared tag.

    A tag forms a cluster when at least ``min_size`` notes carry it. The central
    note is the member with the most connections to other members; connections
    leaving the cluster are not counted. Clusters are ordered by size, largest
    first, then by tag.

    Raises:
        ValueError: If ``min_size`` is smaller than 1.
    """
    if min_size < 1:
        raise ValueError("min_size must be at least 1")

    members_by_tag: dict[str, list[NoteIdentity]] = defaultdict(list)
    for identity, node in sorted(graph.nodes.items()):
        for tag in node.tags:
            members_by_tag[tag].append(identity)

    clusters = []
    for tag, members in members_by_tag.items():
        if len(members) < min_size:
            continue
        member_set = set(members)
        internal = [
            (source, target)
            for source, target in graph.connections
            if source in member_set and target in member_set
        ]
        internal_degree: dict[NoteIdentity, int] = defaultdict(int)
        for source, target in internal:
            internal_degree[source] += 1
            internal_degree[target] += 1
        # members are in path order, so min() keeps the first on ties
        central = min(members, key=lambda identity: -internal_degree[identity])
        clusters.append(
            TagCluster(tag=tag, members=tuple(members), central=central, internal_edges=len(internal))
        )

    clusters.sort(key=lambda cluster: (-len(cluster.members), cluster.tag))
    return clusters


def find_backlinks(graph: LinkGraph, identity: NoteIdentity) -> list[NoteNode]:
    """Notes that link to ``identity``, in path order. A self-link is not a backlink."""
    if not isinstance(identity, NoteIdentity):
        raise TypeError("identity must be a NoteIdentity")
    return [graph.nodes[source] for source in graph.incoming(identity)]


def graph_statistics(graph: LinkGraph) -> dict[str, Any]:
    """Summary counts for a graph.

    ``averageConnections`` is the mean degree per note, rounded to two places.
    """
    node_count = len(graph.nodes)
    ranked = most_connected(graph, limit=1)
    top = ranked[0] if ranked and ranked[0][1] > 0 else None
    total_degree = sum(graph.degree(identity) for identity in graph.nodes)

    return {
        "totalNodes": node_count,
        "totalEdges": len(graph.connections),
        "totalReferences": len(graph.edges),
        "brokenReferences": len(graph.broken),
        "ambiguousReferences": len(graph.ambiguous),
        "orphanCount": len(find_orphans(graph)),
        "averageConnections": round(total_degree / node_count, 2) if node_count else 0.0,
        "mostConnectedNote": {"path": top[0].path, "degree": top[1]} if top else None,
    }


def graph_payload(graph: LinkGraph) -> dict[str, Any]:
    """Serializable nodes and weighted edges, self-edges included."""
    weights = graph.edge_weights()
    return {
        "nodes": [node.as_payload() for _, node in sorted(graph.nodes.items())],
        "edges": [
            {"source": source.path, "target": target.path, "weight": weight}
            for (source, target), weight in sorted(weights.items())
        ],
    }
