"""Tests for the layered node lookup."""

from netlayout.layout.index import ALL_LOOKUPS, STRICT_LOOKUPS, Lookup, NodeIndex
from netlayout.model.diagram import Node, NodeKind, Position


def _node(node_id: str, label: str = None) -> Node:
    data = {"label": label} if label is not None else {}
    return Node(id=node_id, kind=NodeKind.PLAIN_DEVICE, position=Position(0, 0), data=data)


def _index(*nodes: Node) -> NodeIndex:
    index = NodeIndex()
    for node in nodes:
        index.add(node)
    return index


class TestResolve:
    """Layer precedence and tie-breaking."""

    def test_exact_id_first(self) -> None:
        index = _index(_node("device-lan-web"), _node("web"))
        assert index.resolve("web") == ("web", Lookup.EXACT)

    def test_registered_name_before_suffix(self) -> None:
        index = _index(_node("device-a-web"), _node("device-b-web"))
        index.register_name("web", "device-b-web")
        assert index.resolve("web") == ("device-b-web", Lookup.NAME)

    def test_suffix_takes_first_emitted(self) -> None:
        index = _index(_node("device-a-web"), _node("device-b-web"))
        assert index.resolve("web") == ("device-a-web", Lookup.SUFFIX)

    def test_suffix_matches_whole_dash_segments_only(self) -> None:
        index = _index(_node("device-lan-myweb"))
        assert index.resolve("web") is None
        assert index.resolve("lan-myweb") == ("device-lan-myweb", Lookup.SUFFIX)

    def test_label_layer_is_opt_in(self) -> None:
        index = _index(_node("cloud-global", label="Global Internet"))
        assert index.resolve("Global Internet") is None
        assert index.resolve("Global Internet", ALL_LOOKUPS) == ("cloud-global", Lookup.LABEL)

    def test_exclude_skips_candidates(self) -> None:
        index = _index(_node("device-a-web"), _node("device-b-web"))
        assert index.resolve("web", exclude=("device-a-web",)) == ("device-b-web", Lookup.SUFFIX)

    def test_empty_reference_never_matches(self) -> None:
        index = _index(_node("device-a-web"))
        assert index.resolve("", ALL_LOOKUPS) is None


class TestSubstringFragility:
    """The substring layer matches unrelated nodes; strict lookups never do."""

    def test_substring_matches_unrelated_node(self) -> None:
        index = _index(_node("device-lan-db2"), _node("device-lan-db"))
        # "db" has an exact suffix match, which wins over the substring scan
        assert index.resolve("db", ALL_LOOKUPS) == ("device-lan-db", Lookup.SUFFIX)
        # A reference with no better match falls through to the first id containing it
        assert index.resolve("lan-d", ALL_LOOKUPS) == ("device-lan-db2", Lookup.SUBSTRING)

    def test_strict_lookups_skip_substring(self) -> None:
        index = _index(_node("device-lan-db2"))
        assert Lookup.SUBSTRING not in STRICT_LOOKUPS
        assert index.resolve("db", STRICT_LOOKUPS) is None
        assert index.resolve("db", ALL_LOOKUPS) == ("device-lan-db2", Lookup.SUBSTRING)


def test_find_by_fragments_checks_ids_and_labels() -> None:
    index = _index(_node("device-AS1-tokyo"), _node("device-AS1-x", label="Osaka POP"))
    assert index.find_by_fragments(["Osaka"]) == "device-AS1-x"
    assert index.find_by_fragments(["tokyo", "Osaka"]) == "device-AS1-tokyo"
    assert index.find_by_fragments(["tokyo"], exclude=("device-AS1-tokyo",)) is None
    assert index.find_by_fragments([]) is None


def test_container_protocol() -> None:
    index = _index(_node("a"), _node("b"))
    assert "a" in index and "c" not in index
    assert len(index) == 2
    index.register_name("alpha", "a")
    assert index.id_for_name("alpha") == "a"
    assert index.id_for_name("beta") is None
