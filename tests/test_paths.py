"""
Tests for KCQL field paths.
"""

import pytest

from kcql.paths import MISSING, WILDCARD, extract, merge, parse_path, project, set_path


@pytest.fixture
def pod():
    return {
        "metadata": {"name": "web-1", "labels": {"app": "web", "app.io/tier": "front"}},
        "spec": {
            "containers": [
                {"name": "main", "image": "web:1.0", "ports": [{"containerPort": 80}]},
                {"name": "sidecar", "image": "proxy:2.0"},
            ],
        },
    }


class TestParsePath:
    """Tests for parse_path()."""

    def test_dotted(self):
        assert parse_path("metadata.name") == ["metadata", "name"]

    def test_index_and_wildcards(self):
        assert parse_path("spec.containers[0].image") == ["spec", "containers", 0, "image"]
        assert parse_path("spec.containers[].image") == ["spec", "containers", WILDCARD, "image"]
        assert parse_path("spec.containers[*].image") == ["spec", "containers", WILDCARD, "image"]
        assert parse_path("metadata.labels.*") == ["metadata", "labels", WILDCARD]

    def test_quoted_segment(self):
        assert parse_path('metadata.labels."app.io/tier"') == ["metadata", "labels", "app.io/tier"]

    @pytest.mark.parametrize("path", ["", "a..b", ".a", "a.", "[0]", "a[x]", "a[²]", 'a"b"'])
    def test_malformed(self, path):
        with pytest.raises(ValueError):
            parse_path(path)


class TestExtractAndProject:
    """Tests for extract() and project()."""

    def test_extract(self, pod):
        assert extract(pod, "metadata.name") == ["web-1"]
        assert extract(pod, "spec.containers[].image") == ["web:1.0", "proxy:2.0"]
        assert extract(pod, "spec.containers[1].name") == ["sidecar"]
        assert extract(pod, "spec.containers[5].name") == []
        assert extract(pod, "status.phase") == []

    def test_project_nested(self, pod):
        assert project(pod, "metadata.name") == {"metadata": {"name": "web-1"}}

    def test_project_wildcard(self, pod):
        assert project(pod, "spec.containers[*].image") == {
            "spec": {"containers": [{"image": "web:1.0"}, {"image": "proxy:2.0"}]}
        }

    def test_project_missing(self, pod):
        assert project(pod, "status.phase") is MISSING

    def test_merge_projections(self, pod):
        merged = merge(project(pod, "metadata.name"), project(pod, "metadata.labels.app"))
        assert merged == {"metadata": {"name": "web-1", "labels": {"app": "web"}}}

    def test_project_copies(self, pod):
        part = project(pod, "metadata.labels")
        part["metadata"]["labels"]["app"] = "changed"
        assert pod["metadata"]["labels"]["app"] == "web"


class TestSetPath:
    """Tests for set_path()."""

    def test_creates_intermediate_mappings(self):
        assert set_path({}, "spec.replicas", 3) == {"spec": {"replicas": 3}}

    def test_rejects_index(self):
        with pytest.raises(ValueError):
            set_path({}, "spec.containers[0].image", "x")

    def test_rejects_crossing_scalar(self):
        with pytest.raises(ValueError):
            set_path({"spec": 1}, "spec.replicas", 3)
