"""Tests for orphan, ranking, cluster and backlink queries."""

import pytest

from vault_graph.core.analytics import (
    find_backlinks,
    find_clusters,
    find_orphans,
    graph_payload,
    graph_statistics,
    most_connected,
)
from vault_graph.core.graph_builder import build_link_graph, graph_from_notes
from vault_graph.data_models import NoteIdentity, ScannedNote


def graph_of(notes):
    return graph_from_notes([ScannedNote(path, text) for path, text in notes.items()])


class TestOrphansAndRanking:
    """A links to B; B and C have no links."""

    @pytest.fixture
    def graph(self, make_vault):
        return build_link_graph(make_vault({"A.md": "[[B]]", "B.md": "", "C.md": ""}))

    def test_orphans(self, graph):
        assert [node.path for node in find_orphans(graph)] == ["C.md"]

    def test_most_connected(self, graph):
        ranked = [(node.id.path, degree) for node, degree in most_connected(graph)]
        assert ranked == [("A", 1), ("B", 1), ("C", 0)]

    def test_most_connected_limit(self, graph):
        assert len(most_connected(graph, limit=2)) == 2
        assert most_connected(graph, limit=0) == []
        with pytest.raises(ValueError):
            most_connected(graph, limit=-1)

    def test_self_link_only_note_is_orphan(self):
        graph = graph_of({"Solo.md": "I link to [[Solo]]", "Other.md": "nothing"})
        assert [node.path for node in find_orphans(graph)] == ["Other.md", "Solo.md"]
        assert most_connected(graph)[0][1] == 0

    def test_repeated_links_count_once(self):
        graph = graph_of({"A.md": "[[B]] [[B]] [[B]]", "B.md": "", "C.md": "[[B]]"})
        degrees = {node.id.path: degree for node, degree in most_connected(graph)}
        assert degrees == {"A": 1, "B": 2, "C": 1}


class TestClusters:
    """Tag clusters and their central note."""

    def test_cluster_needs_three_members(self):
        graph = graph_of(
            {
                "A.md": "#small",
                "B.md": "#small",
                "C.md": "#big",
                "D.md": "#big",
                "E.md": "#big",
            }
        )
        clusters = find_clusters(graph)
        assert [cluster.tag for cluster in clusters] == ["big"]
        assert [member.path for member in clusters[0].members] == ["C", "D", "E"]

    def test_central_node_uses_only_internal_edges(self):
        """A global hub outside the cluster's links does not become central."""
        notes = {
            "Hub.md": "#topic [[X1]] [[X2]] [[X3]] [[X4]]",
            "M1.md": "#topic [[M2]] [[M3]]",
            "M2.md": "#topic [[M1]]",
            "M3.md": "#topic",
        }
        notes.update({f"X{i}.md": "" for i in range(1, 5)})
        graph = graph_of(notes)
        (cluster,) = find_clusters(graph)
        assert cluster.central == NoteIdentity.from_path("M1")
        assert cluster.internal_edges == 3
        assert cluster.as_payload()["name"] == "#topic"

    def test_central_tie_breaks_by_path(self):
        graph = graph_of({"B.md": "#t", "A.md": "#t", "C.md": "#t"})
        (cluster,) = find_clusters(graph)
        assert cluster.central.path == "A"
        assert cluster.internal_edges == 0

    def test_clusters_sorted_by_size_then_tag(self):
        notes = {f"N{i}.md": "#beta #alpha" for i in range(3)}
        notes.update({f"M{i}.md": "#gamma" for i in range(4)})
        graph = graph_of(notes)
        assert [cluster.tag for cluster in find_clusters(graph)] == ["gamma", "alpha", "beta"]

    def test_invalid_min_size(self):
        with pytest.raises(ValueError):
            find_clusters(graph_of({}), min_size=0)


class TestBacklinksAndStatistics:
    @pytest.fixture
    def graph(self):
        return graph_of(
            {
                "Target.md": "[[Target]]",
                "One.md": "[[Target]] [[Target]]",
                "Two.md": "[two](Target.md)",
                "Lonely.md": "[[Nowhere]]",
            }
        )

    def test_backlinks(self, graph):
        sources = find_backlinks(graph, NoteIdentity.from_path("Target"))
        assert [node.path for node in sources] == ["One.md", "Two.md"]

    def test_backlinks_requires_identity(self, graph):
        with pytest.raises(TypeError):
            find_backlinks(graph, "Target")

    def test_statistics(self, graph):
        stats = graph_statistics(graph)
        assert stats["totalNodes"] == 4
        assert stats["totalEdges"] == 2
        assert stats["totalReferences"] == 4
        assert stats["brokenReferences"] == 1
        assert stats["orphanCount"] == 1
        assert stats["averageConnections"] == 1.0
        assert stats["mostConnectedNote"] == {"path": "Target.md", "degree": 2}

    def test_statistics_of_empty_graph(self):
        stats = graph_statistics(graph_of({}))
        assert stats["averageConnections"] == 0.0
        assert stats["mostConnectedNote"] is None

    def test_payload_weights(self, graph):
        edges = {(e["source"], e["target"]): e["weight"] for e in graph_payload(graph)["edges"]}
        assert edges[("One", "Target")] == 2
        assert edges[("Target", "Target")] == 1
