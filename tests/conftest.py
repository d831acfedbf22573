"""
Shared test fixtures — a small docs tree, its rendered site, and a config.
"""

import textwrap
from pathlib import Path

import pytest

from coursepack.core.models.entry import Category
from coursepack.core.models.registry import Registry

from tests.sample_site import (
    HANDOUT_ID,
    INTRO_ID,
    RENDERED_FILES,
    SOURCE_FILES,
    UNIT1_ID,
    UNIT2_ID,
    entry,
    write_tree,
)


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """A docs tree with one semester, one subject and two units."""
    return write_tree(tmp_path / "website" / "docs", SOURCE_FILES)


@pytest.fixture
def rendered_root(tmp_path: Path) -> Path:
    """The rendered site for ``docs_root``, plus a 404 page."""
    return write_tree(tmp_path / "website" / "build" / "docs", RENDERED_FILES)


@pytest.fixture
def pack_config_file(tmp_path: Path, docs_root: Path, rendered_root: Path) -> Path:
    """contentpack.yml pointing at the sample trees."""
    path = tmp_path / "contentpack.yml"
    path.write_text(textwrap.dedent("""\
        pack:
          docs_dir: website/docs
          rendered_dir: website/build/docs
          output_dir: content
    """))
    return path


@pytest.fixture
def course_registry() -> Registry:
    """Registry for two subjects of semester 1 plus an intro page.

    Unit 2 is registered before unit 1 so ordering is exercised.
    """
    return Registry(entries={
        INTRO_ID: entry("Welcome", semester=0, subject="General"),
        HANDOUT_ID: entry("Course Handout", Category.HANDOUT, order=0),
        UNIT2_ID: entry("Unit 2 - Loops", Category.UNIT, unit=2, order=1),
        UNIT1_ID: entry("Unit 1 - Basics", Category.UNIT, unit=1, order=2),
        "semester_1_data_structures_assignments_a1": entry(
            "Assignment 1", Category.ASSIGNMENTS, subject="Data Structures", order=0,
        ),
    })
