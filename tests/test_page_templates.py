"""
Tests for page templates — document footers and hub pages.
"""

from coursepack.core.models.entry import Category
from coursepack.core.models.manifest import Relation
from coursepack.core.services.page_templates import (
    HubCard,
    RelatedLink,
    render_document,
    render_hub,
    render_related,
    render_sequence_nav,
)


class TestSequenceNav:
    """Tests for render_sequence_nav()."""

    def test_middle_unit(self):
        html = render_sequence_nav(Relation(prev="u1", next="u3", up="hub"))
        assert '<a href="app://doc/u1">← Prev</a>' in html
        assert '<a href="app://doc/u3">Next →</a>' in html
        assert '<a href="app://doc/hub">↑ Notes</a>' in html

    def test_ends_disabled(self):
        html = render_sequence_nav(Relation(up="hub"))
        assert '<a class="disabled">← Prev</a>' in html
        assert '<a class="disabled">Next →</a>' in html

    def test_no_up(self):
        assert "↑ Notes" not in render_sequence_nav(Relation(next="u2"))


class TestRelated:
    """Tests for render_related()."""

    def test_empty(self):
        assert render_related([]) == ""

    def test_escapes_labels(self):
        html = render_related([RelatedLink("h", "C & C++ overview")])
        assert "C &amp; C++ overview" in html
        assert 'href="app://doc/h"' in html


class TestRenderDocument:
    """Tests for render_document()."""

    def test_standalone_page(self):
        page = render_document("Loops <1>", "<p>body</p>", "<hr/>")
        assert page.startswith("<!DOCTYPE html>")
        assert '<meta charset="UTF-8">' in page
        assert "<title>Loops &lt;1&gt;</title>" in page
        assert page.index("<p>body</p>") < page.index("<hr/>")
        assert "<script" not in page


class TestRenderHub:
    """Tests for render_hub()."""

    def test_cards_in_order(self):
        cards = [HubCard("b", "Beta", Category.HANDOUT), HubCard("a", "Alpha", Category.UNIT)]
        page = render_hub("T", "Heading", "Sub", "📚", cards)
        assert page.index("app://doc/b") < page.index("app://doc/a")
        assert "back-link" not in page

    def test_back_link(self):
        page = render_hub("T", "H", "S", "📚", [], back=RelatedLink("semester_1__hub", "Semester 1"))
        assert '<a href="app://doc/semester_1__hub" class="back-link">← Back to Semester 1</a>' in page

    def test_unknown_category_icon(self):
        assert HubCard("x", "X", "mystery").icon == "📄"
        assert HubCard("x", "X", "mystery").description == ""
