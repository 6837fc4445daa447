"""
Tests for domain objects.
"""

from gitsplit.domain import (
    Prefix,
    Reference,
    SplitConfiguration,
    SplitDetail,
    SplitReport,
    SplitStatus,
)


class TestReference:
    """Tests for Reference."""

    def test_namespace(self):
        assert Reference("main", "refs/heads/main", "a" * 40).namespace == "heads"
        assert Reference("release/1.0", "refs/heads/release/1.0", "a" * 40).namespace == "heads"
        assert Reference("v1", "refs/tags/v1", "a" * 40).namespace == "tags"
        assert Reference("HEAD", "HEAD", "a" * 40).namespace == ""

    def test_to_dict(self):
        assert Reference("v1", "refs/tags/v1", "b" * 40).to_dict() == {
            'alias': 'v1',
            'name': 'refs/tags/v1',
            'id': "b" * 40,
        }


class TestSplitConfiguration:
    """Tests for SplitConfiguration and Prefix."""

    def test_prefix_parse(self):
        assert str(Prefix.parse("lib/")) == "lib/:"
        assert Prefix.parse("lib/:src/") == Prefix(source="lib/", destination="src/")

    def test_create_normalises_to_tuples(self):
        split = SplitConfiguration.create(["a", "b:c"], ["t"])
        assert split.prefixes == ("a", "b:c")
        assert split.targets == ("t",)
        assert split.label == "a, b:c"
        assert split.parsed_prefixes[1].destination == "c"
        assert split.to_dict() == {'prefixes': ['a', 'b:c'], 'targets': ['t']}


class TestSplitReport:
    """Tests for SplitReport."""

    def test_empty_report(self):
        report = SplitReport()
        assert report.total == 0
        assert report.success

    def test_add_detail(self):
        report = SplitReport()
        report.add_detail(SplitDetail("main", ["lib"], SplitStatus.SPLIT))
        report.add_detail(SplitDetail("v1", ["lib"], SplitStatus.CACHED))
        report.add_detail(SplitDetail("v2", ["lib"], SplitStatus.FAILED, error="boom"))

        assert (report.total, report.split, report.cached, report.failed) == (3, 1, 1, 1)
        assert not report.success
        assert report.errors == ["v2: boom"]
        assert report.to_dict()['type'] == 'summary'

    def test_detail_to_dict(self):
        d = SplitDetail("main", ["lib"], SplitStatus.STALE, source_id="a" * 40).to_dict()
        assert d['status'] == 'stale'
        assert d['reference'] == 'main'
        assert 'error' not in d
