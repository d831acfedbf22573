"""
Tests for link resolution — href classification, normalisation and rewriting.
"""

import pytest

from coursepack.core.models.entry import Category
from coursepack.core.models.registry import Registry
from coursepack.core.services.link_rewriter import (
    HrefKind,
    LinkResolver,
    app_link,
    build_route_table,
    classify_href,
    normalize_target,
    split_fragment,
)

from tests.sample_site import entry


@pytest.fixture
def registry() -> Registry:
    return Registry(entries={
        "semester_1_c_programming_notes_unit1": entry(
            "Unit 1", Category.UNIT, source="semester_1/c-programming/notes/unit1.mdx",
        ),
        "semester_1_c_programming_handout": entry(
            "Handout", Category.HANDOUT, source="semester_1/c-programming/handout.mdx",
        ),
        "semester_1_data_structures_handout": entry(
            "DS Handout", Category.HANDOUT, subject="Data Structures",
            source="semester_1/data structures/handout.mdx",
        ),
        "root": entry("Home", semester=0, subject="General", source="index.md"),
    })


class TestClassifyHref:
    """Tests for classify_href()."""

    @pytest.mark.parametrize("href,kind", [
        ("", HrefKind.EMPTY),
        ("   ", HrefKind.EMPTY),
        ("#section", HrefKind.FRAGMENT),
        ("https://example.com/a", HrefKind.EXTERNAL),
        ("HTTP://EXAMPLE.COM", HrefKind.EXTERNAL),
        ("//cdn.example.com/x.js", HrefKind.EXTERNAL),
        ("mailto:a@b.c", HrefKind.NON_NAVIGATIONAL),
        ("tel:+123", HrefKind.NON_NAVIGATIONAL),
        ("javascript:void(0)", HrefKind.NON_NAVIGATIONAL),
        ("app://doc/x", HrefKind.NON_NAVIGATIONAL),
        ("/docs/a/b", HrefKind.INTERNAL),
        ("../b", HrefKind.INTERNAL),
        ("unit2", HrefKind.INTERNAL),
    ])
    def test_kinds(self, href: str, kind: HrefKind):
        assert classify_href(href) == kind


class TestNormalizeTarget:
    """Tests for normalize_target()."""

    def test_absolute_under_base(self):
        assert normalize_target("/docs/semester_1/x/notes/unit1", "intro") == "semester_1/x/notes/unit1"

    def test_absolute_outside_base(self):
        assert normalize_target("/semester_1/x", "intro") == "semester_1/x"

    def test_relative_sibling(self):
        assert normalize_target("unit2", "semester_1/x/notes/unit1") == "semester_1/x/notes/unit2"

    def test_relative_parent(self):
        assert normalize_target("../handout", "semester_1/x/notes/unit1") == "semester_1/x/handout"

    def test_drops_query_extension_and_index(self):
        assert normalize_target("/docs/a/b/index.html?x=1", "") == "a/b"
        assert normalize_target("/docs/a/b.md", "") == "a/b"

    def test_trailing_slash(self):
        assert normalize_target("/docs/a/b/", "") == "a/b"

    def test_docs_root(self):
        assert normalize_target("/docs/", "a/b") == ""
        assert normalize_target("/docs", "a/b") == ""

    def test_query_only_stays_on_page(self):
        assert normalize_target("?tab=1", "semester_1/x/notes/unit1") == "semester_1/x/notes/unit1"
        assert normalize_target("", "a/b") == "a/b"

    def test_escaping_root(self):
        assert normalize_target("../../../x", "a/b") is None

    def test_custom_base(self):
        assert normalize_target("/guide/a", "", route_base="/guide") == "a"
        assert normalize_target("/guide/a", "", route_base="/") == "guide/a"


class TestLinkResolver:
    """Tests for LinkResolver."""

    def test_round_trip_with_fragment(self, registry: Registry):
        resolver = LinkResolver(registry)
        href = "/docs/semester_1/c-programming/notes/unit1#loops"
        assert resolver.rewrite(href, "intro") == "app://doc/semester_1_c_programming_notes_unit1#loops"

    def test_relative(self, registry: Registry):
        resolver = LinkResolver(registry)
        got = resolver.rewrite("../handout", "semester_1/c-programming/notes/unit1")
        assert got == "app://doc/semester_1_c_programming_handout"

    def test_percent_encoded(self, registry: Registry):
        resolver = LinkResolver(registry)
        got = resolver.rewrite("/docs/semester_1/data%20structures/handout", "")
        assert got == "app://doc/semester_1_data_structures_handout"

    def test_root(self, registry: Registry):
        assert LinkResolver(registry).rewrite("/docs/", "a") == "app://doc/root"

    def test_route_table_fallback(self):
        """Ids that were not derived from the route still resolve via source."""
        legacy = Registry(entries={
            "s1_cprogramming_notes_unit1": entry(
                "Unit 1", Category.UNIT, source="semester_1/c-programming/notes/unit1.mdx",
            ),
        })
        resolver = LinkResolver(legacy)
        got = resolver.rewrite("/docs/semester_1/c-programming/notes/unit1#loops", "")
        assert got == "app://doc/s1_cprogramming_notes_unit1#loops"

    def test_case_insensitive_fallback(self):
        legacy = Registry(entries={"legacy": entry("X", source="Semester_1/CS/Intro.md")})
        assert LinkResolver(legacy).resolve_route("semester_1/cs/intro") == "legacy"

    def test_query_only_resolves_to_current_document(self):
        nested = Registry(entries={
            "a": entry("A", source="a.md"),
            "a_b": entry("A B", source="a/b.md"),
        })
        resolver = LinkResolver(nested)
        assert resolver.rewrite("?tab=1", "a/b") == "app://doc/a_b"
        assert resolver.rewrite("?x#frag", "a/b") == "app://doc/a_b#frag"

    def test_unresolved(self, registry: Registry):
        resolver = LinkResolver(registry)
        assert resolver.rewrite("/docs/missing/page", "") is None
        assert resolver.rewrite("../../../../x", "a/b") is None


class TestHelpers:
    """Tests for the small link helpers."""

    def test_split_fragment(self):
        assert split_fragment("a/b#c") == ("a/b", "#c")
        assert split_fragment("a/b") == ("a/b", "")

    def test_app_link(self):
        assert app_link("x_y", "#z") == "app://doc/x_y#z"

    def test_route_table_first_wins(self):
        reg = Registry(entries={
            "first": entry("A", source="a/b.md"),
            "second": entry("B", source="a/b/index.md"),
        })
        assert build_route_table(reg)["a/b"] == "first"
