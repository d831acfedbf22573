"""
Page templates — HTML shells for exported documents and hub pages.

Every page carries its styling inline: the offline client has no
network and the pack ships no stylesheet.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

from coursepack.core.models.entry import Category
from coursepack.core.models.manifest import Relation
from coursepack.core.services.link_rewriter import app_link

DOCUMENT_STYLES = """\
* { box-sizing: border-box; margin: 0; padding: 0; }
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
    line-height: 1.6; color: #1a1a1a; background: #fff;
    padding: 16px; max-width: 100%; font-size: 16px;
}
h1 { font-size: 1.8em; margin: 0.5em 0; }
h2 { font-size: 1.5em; margin: 1em 0 0.5em; border-bottom: 1px solid #eee; padding-bottom: 0.3em; }
h3 { font-size: 1.25em; margin: 1em 0 0.5em; }
h4, h5, h6 { font-size: 1.1em; margin: 1em 0 0.5em; }
p { margin: 0.8em 0; }
a { color: #0066cc; text-decoration: none; }
ul, ol { margin: 0.8em 0; padding-left: 1.5em; }
li { margin: 0.3em 0; }
code { background: #f4f4f4; padding: 2px 6px; border-radius: 4px; font-family: Menlo, Monaco, 'Ubuntu Mono', monospace; font-size: 0.9em; }
pre { background: #282c34; color: #abb2bf; padding: 16px; border-radius: 8px; overflow-x: auto; margin: 1em 0; }
pre code { background: none; padding: 0; color: inherit; }
blockquote { border-left: 4px solid #0066cc; margin: 1em 0; padding: 0.5em 1em; background: #f8f9fa; }
table { border-collapse: collapse; width: 100%; margin: 1em 0; overflow-x: auto; display: block; }
th, td { border: 1px solid #ddd; padding: 8px 12px; text-align: left; }
th { background: #f4f4f4; font-weight: 600; }
img { max-width: 100%; height: auto; border-radius: 8px; margin: 1em 0; }
hr { border: none; border-top: 1px solid #eee; margin: 2em 0; }
.hash-link { display: none; }
.image-placeholder { display: block; padding: 20px; background: #f0f0f0; text-align: center; color: #666; border-radius: 8px; margin: 1em 0; }
.seq-nav { display: flex; justify-content: space-between; align-items: center; gap: 8px; padding: 16px; margin: 24px 0 8px; background: #f1f3f5; border-radius: 12px; border: 1px solid #dee2e6; }
.seq-nav a { padding: 10px 16px; background: #fff; border-radius: 8px; font-weight: 500; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
.seq-nav a.disabled { opacity: 0.4; pointer-events: none; }
.related { margin: 24px 0; padding: 16px; background: #f0f7ff; border-radius: 12px; border-left: 4px solid #0066cc; }
.related h3 { margin: 0 0 12px; font-size: 1em; color: #0066cc; }
.related ul { margin: 0; padding-left: 20px; }
"""

HUB_STYLES = """\
* { box-sizing: border-box; margin: 0; padding: 0; }
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
    min-height: 100vh; padding: 20px; color: #fff;
}
.hub-container { max-width: 600px; margin: 0 auto; }
.hub-header { text-align: center; padding: 30px 20px; margin-bottom: 24px; }
.hub-icon { font-size: 3em; margin-bottom: 12px; }
.hub-title { font-size: 1.8em; font-weight: 700; margin-bottom: 8px; }
.hub-subtitle { font-size: 1em; opacity: 0.9; }
.hub-cards { display: flex; flex-direction: column; gap: 16px; }
.hub-card { display: flex; align-items: center; gap: 16px; background: rgba(255,255,255,0.95); color: #1a1a1a; padding: 20px 24px; border-radius: 16px; text-decoration: none; box-shadow: 0 4px 15px rgba(0,0,0,0.1); }
.card-icon { font-size: 2em; width: 50px; height: 50px; display: flex; align-items: center; justify-content: center; border-radius: 12px; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); }
.card-content { flex: 1; }
.card-title { font-size: 1.1em; font-weight: 600; margin-bottom: 4px; }
.card-desc { font-size: 0.85em; color: #666; }
.card-arrow { font-size: 1.2em; color: #999; }
.back-link { display: inline-block; color: rgba(255,255,255,0.9); text-decoration: none; margin-bottom: 16px; font-size: 0.95em; }
"""

CATEGORY_ICONS: dict[str, str] = {
    Category.HANDOUT: "📘",
    Category.NOTES: "📝",
    Category.NOTES_INDEX: "📝",
    Category.NOTES_HUB: "📝",
    Category.ASSIGNMENTS: "✏️",
    Category.MISC: "🎯",
    Category.PYQ: "📋",
    Category.PROJECTS: "🚀",
    Category.UNIT: "📖",
    Category.SUBJECT_INDEX: "📚",
    Category.SUBJECT_HUB: "📚",
    Category.SEMESTER_INDEX: "🎓",
    Category.SEMESTER_HUB: "🎓",
}

CATEGORY_DESCRIPTIONS: dict[str, str] = {
    Category.HANDOUT: "Official course handout and guidelines",
    Category.NOTES: "Lecture notes and study materials",
    Category.NOTES_INDEX: "All unit notes and materials",
    Category.NOTES_HUB: "All unit notes and materials",
    Category.ASSIGNMENTS: "Homework and assignment problems",
    Category.MISC: "Quizzes, activities and extras",
    Category.PYQ: "Previous year questions",
    Category.PROJECTS: "Project guides and resources",
    Category.UNIT: "Study notes and materials",
    Category.SUBJECT_HUB: "Course materials",
}


@dataclass(frozen=True)
class HubCard:
    doc_id: str
    title: str
    category: str = Category.CONTENT

    @property
    def icon(self) -> str:
        return CATEGORY_ICONS.get(self.category, "📄")

    @property
    def description(self) -> str:
        return CATEGORY_DESCRIPTIONS.get(self.category, "")


@dataclass(frozen=True)
class RelatedLink:
    doc_id: str
    label: str


def _page(title: str, styles: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{escape(title)}</title>\n"
        f"<style>\n{styles}</style>\n"
        "</head>\n"
        "<body>\n"
        f"{body}\n"
        "</body>\n"
        "</html>\n"
    )


# ── Exported documents ──────────────────────────────────────────────


def render_sequence_nav(relation: Relation) -> str:
    """Prev / up / next footer for a unit document."""
    prev_link = (
        f'<a href="{app_link(relation.prev)}">← Prev</a>'
        if relation.prev else '<a class="disabled">← Prev</a>'
    )
    up_link = f'<a href="{app_link(relation.up)}">↑ Notes</a>' if relation.up else ""
    next_link = (
        f'<a href="{app_link(relation.next)}">Next →</a>'
        if relation.next else '<a class="disabled">Next →</a>'
    )
    parts = "\n  ".join(p for p in (prev_link, up_link, next_link) if p)
    return f'<hr/>\n<nav class="seq-nav">\n  {parts}\n</nav>'


def render_related(links: list[RelatedLink]) -> str:
    if not links:
        return ""
    items = "\n    ".join(
        f'<li><a href="{app_link(link.doc_id)}">{escape(link.label)}</a></li>'
        for link in links
    )
    return f'<aside class="related">\n  <h3>Related</h3>\n  <ul>\n    {items}\n  </ul>\n</aside>'


def render_document(title: str, content_html: str, footer_html: str = "") -> str:
    """Self-contained page for one exported document."""
    body = content_html.strip()
    if footer_html:
        body = f"{body}\n{footer_html}"
    return _page(title, DOCUMENT_STYLES, body)


# ── Hub pages ───────────────────────────────────────────────────────


def _render_card(card: HubCard) -> str:
    desc = card.description
    desc_html = f'\n      <div class="card-desc">{escape(desc)}</div>' if desc else ""
    return (
        f'  <a href="{app_link(card.doc_id)}" class="hub-card">\n'
        f'    <div class="card-icon">{card.icon}</div>\n'
        f'    <div class="card-content">\n'
        f'      <div class="card-title">{escape(card.title)}</div>{desc_html}\n'
        f"    </div>\n"
        f'    <div class="card-arrow">→</div>\n'
        f"  </a>"
    )


def render_hub(
    title: str,
    heading: str,
    subtitle: str,
    icon: str,
    cards: list[HubCard],
    back: RelatedLink | None = None,
) -> str:
    """Landing page listing ``cards`` in the given order."""
    back_html = (
        f'<a href="{app_link(back.doc_id)}" class="back-link">← Back to {escape(back.label)}</a>\n'
        if back else ""
    )
    cards_html = "\n".join(_render_card(c) for c in cards)
    body = (
        '<div class="hub-container">\n'
        f"{back_html}"
        '<div class="hub-header">\n'
        f'  <div class="hub-icon">{icon}</div>\n'
        f'  <h1 class="hub-title">{escape(heading)}</h1>\n'
        f'  <p class="hub-subtitle">{escape(subtitle)}</p>\n'
        "</div>\n"
        f'<div class="hub-cards">\n{cards_html}\n</div>\n'
        "</div>"
    )
    return _page(title, HUB_STYLES, body)
