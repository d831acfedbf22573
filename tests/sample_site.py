"""
Sample course site used across the test suite.

A docs tree with one semester, one subject (two units, a handout, an
assignment), an intro page, and the pages a renderer would publish for it.
"""

import textwrap
from pathlib import Path

from coursepack.core.models.entry import Category, DocEntry


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create ``files`` (relative path → text) under ``root``."""
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


def rendered_page(title: str, article: str) -> str:
    """A page shaped like a Docusaurus build: chrome around an <article>."""
    return textwrap.dedent(f"""\
        <!DOCTYPE html>
        <html>
        <head>
          <title>{title} | Course Site</title>
          <link rel="stylesheet" href="/assets/css/styles.css">
          <script src="/assets/js/main.js"></script>
        </head>
        <body>
          <nav class="navbar"><a href="/docs/intro">Home</a></nav>
          <main>
            <div class="sidebar">Sidebar</div>
            <article>{article}</article>
          </main>
          <footer>Footer</footer>
        </body>
        </html>
    """)


SOURCE_FILES = {
    "intro.md": "# Welcome\n\nStart here.\n",
    "semester_1/index.mdx": "---\ntitle: Semester One\n---\n\nOverview.\n",
    "semester_1/c_programming/handout.mdx": "# Course Handout\n",
    "semester_1/c_programming/notes/unit1.mdx": "---\ntitle: Unit 1 - Basics\n---\n\nBody.\n",
    "semester_1/c_programming/notes/unit2.mdx": "# Unit 2 - Loops\n",
    "semester_1/c_programming/assignments/week1.md": "# Week 1\n",
    "semester_1/c_programming/_partial.mdx": "# Partial\n",
    ".hidden/secret.md": "# Hidden\n",
}

UNIT1_ARTICLE = """
<nav class="breadcrumbs">Home / Notes</nav>
<h1>Unit 1 - Basics</h1>
<p>See <a href="/docs/semester_1/c_programming/notes/unit2#loops">loops</a>,
the <a href="../handout">handout</a>, <a href="https://example.com">external</a>,
<a href="#top">top</a>, <a href="mailto:staff@example.com">mail</a>
and <a href="/docs/missing/page">a missing page</a>.</p>
<img src="/img/diagram.png" alt="Diagram">
<img src="data:image/png;base64,AAAA" alt="Inline">
<div class="codeBlock_bY9V language-c" onclick="copy()"><pre>int x;</pre></div>
<span class="token_abcd1">x</span>
<script>alert("hi")</script>
<nav class="pagination-nav"><a href="/docs/semester_1/c_programming/notes/unit2">Next</a></nav>
"""

RENDERED_FILES = {
    "intro.html": rendered_page("Welcome", "<h1>Welcome</h1><p>Start here.</p>"),
    "semester_1/index.html": rendered_page("Semester One", "<h1>Semester One</h1>"),
    "semester_1/c_programming/handout/index.html": rendered_page(
        "Course Handout", '<h1>Course Handout</h1><a href="notes/unit1">Unit 1</a>',
    ),
    "semester_1/c_programming/notes/unit1/index.html": rendered_page("Unit 1 - Basics", UNIT1_ARTICLE),
    "semester_1/c_programming/notes/unit2/index.html": rendered_page(
        "Unit 2 - Loops", '<h1>Unit 2 - Loops</h1><a href="unit1">Back</a>',
    ),
    "semester_1/c_programming/assignments/week1/index.html": rendered_page(
        "Week 1", "<h1>Week 1</h1>",
    ),
    "404.html": rendered_page("Not Found", "<h1>Page Not Found</h1>"),
}

UNIT1_ID = "semester_1_c_programming_notes_unit1"
UNIT2_ID = "semester_1_c_programming_notes_unit2"
HANDOUT_ID = "semester_1_c_programming_handout"
WEEK1_ID = "semester_1_c_programming_assignments_week1"
SEMESTER_INDEX_ID = "semester_1"
INTRO_ID = "intro"


def entry(title: str, category: Category = Category.CONTENT, **kwargs) -> DocEntry:
    """Shorthand for a grouped DocEntry in semester 1 / C Programming."""
    kwargs.setdefault("semester", 1)
    kwargs.setdefault("subject", "C Programming")
    if category == Category.UNIT:
        kwargs.setdefault("unit", 1)
    return DocEntry(title=title, category=category, **kwargs)
