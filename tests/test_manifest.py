"""
Tests for manifest assembly — docs map, tree, validation and versioning.
"""

from datetime import UTC, datetime

import pytest

from coursepack.core.errors import IntegrityError
from coursepack.core.models.entry import Category
from coursepack.core.models.manifest import NavNode, NodeKind, Relation, RelationGraph
from coursepack.core.models.registry import Registry
from coursepack.core.services.hubs import synthesize_hubs
from coursepack.core.services.manifest import (
    DOC_FIELDS,
    assemble_manifest,
    build_docs_map,
    build_tree,
    pack_version,
    validate_manifest,
)
from coursepack.core.services.relations import build_relations

from tests.sample_site import HANDOUT_ID, INTRO_ID, UNIT1_ID, UNIT2_ID, entry

NOW = datetime(2024, 3, 5, 12, 30, tzinfo=UTC)


@pytest.fixture
def full_registry(course_registry: Registry) -> Registry:
    return synthesize_hubs(course_registry).registry


class TestPackVersion:
    """Tests for pack_version()."""

    def test_format(self):
        assert pack_version(NOW) == "2024.03.05"


class TestDocsMap:
    """Tests for build_docs_map()."""

    def test_projection(self, full_registry: Registry):
        docs = build_docs_map(full_registry)
        assert set(docs) == set(full_registry.ids())
        for fields in docs.values():
            assert tuple(fields) == DOC_FIELDS
        assert docs[UNIT1_ID]["unit"] == 1
        assert docs[UNIT1_ID]["isHub"] is False
        assert docs["semester_1__hub"]["html"] == "docs/semester_1__hub.html"


class TestBuildTree:
    """Tests for build_tree()."""

    def test_semester_order(self, full_registry: Registry):
        tree = build_tree(full_registry)
        assert [n.id for n in tree] == ["intro", "semester_1"]

    def test_intro_holds_leaves(self, full_registry: Registry):
        intro = build_tree(full_registry)[0]
        assert intro.title == "Introduction"
        assert intro.hub_doc_id is None
        assert [c.doc_id for c in intro.children] == [INTRO_ID]

    def test_semester_node(self, full_registry: Registry):
        sem = build_tree(full_registry)[1]
        assert sem.kind == NodeKind.SEMESTER
        assert sem.title == "Semester 1"
        assert sem.hub_doc_id == "semester_1__hub"
        assert [c.id for c in sem.children] == ["subject_s1_c_programming", "subject_s1_data_structures"]

    def test_subject_node(self, full_registry: Registry):
        subject = build_tree(full_registry)[1].children[0]
        assert subject.kind == NodeKind.SUBJECT
        assert subject.hub_doc_id == "semester_1_c_programming__hub"

        notes, handout = subject.children
        assert notes.kind == NodeKind.FOLDER
        assert notes.title == "Notes"
        assert notes.hub_doc_id == "semester_1_c_programming__notes_hub"
        assert [c.doc_id for c in notes.children] == [UNIT1_ID, UNIT2_ID]
        assert handout.kind == NodeKind.LEAF
        assert handout.doc_id == HANDOUT_ID
        assert handout.category == "handout"

    def test_generated_hubs_are_not_leaves(self, full_registry: Registry):
        leaves = {
            node.doc_id
            for root in build_tree(full_registry)
            for node in root.walk()
            if node.kind == NodeKind.LEAF
        }
        assert not any("__" in doc_id for doc_id in leaves)

    def test_authored_hubs_without_synthesis(self):
        registry = Registry(entries={
            "semester_1": entry("Sem", Category.SEMESTER_INDEX, subject="General", is_hub=True),
            "semester_1_c": entry("C", Category.SUBJECT_INDEX, subject="C", is_hub=True),
            "semester_1_c_notes": entry("Notes", Category.NOTES_INDEX, subject="C", is_hub=True),
            "semester_1_c_notes_unit1": entry("U1", Category.UNIT, subject="C"),
        })
        sem = build_tree(registry)[0]
        assert sem.hub_doc_id == "semester_1"
        subject = sem.children[0]
        assert subject.hub_doc_id == "semester_1_c"
        assert subject.children[0].hub_doc_id == "semester_1_c_notes"
        assert len(subject.children) == 1

    def test_leaves_by_order_then_id(self):
        registry = Registry(entries={
            "b": entry("B", order=1),
            "c": entry("C", order=0),
            "a": entry("A", order=1),
        })
        subject = build_tree(registry)[0].children[0]
        assert [c.doc_id for c in subject.children] == ["c", "a", "b"]

    def test_leaf_wire_format(self, full_registry: Registry):
        handout = build_tree(full_registry)[1].children[0].children[1]
        wire = handout.to_wire()
        assert wire == {
            "kind": "leaf",
            "id": HANDOUT_ID,
            "title": "Course Handout",
            "docId": HANDOUT_ID,
            "category": "handout",
        }


class TestValidateManifest:
    """Tests for validate_manifest()."""

    def _leaf(self, doc_id: str) -> NavNode:
        return NavNode(kind=NodeKind.LEAF, id=doc_id, title=doc_id, doc_id=doc_id)

    def test_clean(self):
        report = validate_manifest({"a": {}}, [self._leaf("a")], RelationGraph())
        assert report.ok
        assert report.warnings == []

    def test_missing_leaf(self):
        report = validate_manifest({}, [self._leaf("a")], RelationGraph())
        assert not report.ok
        assert "a" in report.errors[0]

    def test_dangling_hub_is_warning(self):
        node = NavNode(kind=NodeKind.SEMESTER, id="s", title="S", hub_doc_id="gone")
        report = validate_manifest({}, [node], RelationGraph())
        assert report.ok
        assert len(report.warnings) == 1

    def test_dangling_hub_strict(self):
        node = NavNode(kind=NodeKind.SEMESTER, id="s", title="S", hub_doc_id="gone")
        report = validate_manifest({}, [node], RelationGraph(), strict_hubs=True)
        assert not report.ok

    def test_relation_targets(self):
        graph = RelationGraph(next_prev={"a": Relation(prev=None, next="b", up="c")})
        report = validate_manifest({"a": {}}, [], graph)
        assert len(report.errors) == 2

    def test_relation_key(self):
        graph = RelationGraph(next_prev={"x": Relation()})
        assert not validate_manifest({}, [], graph).ok


class TestAssembleManifest:
    """Tests for assemble_manifest()."""

    def test_assemble(self, full_registry: Registry):
        relations = build_relations(full_registry)
        manifest = assemble_manifest(full_registry, relations, now=NOW)
        assert manifest.pack_version == "2024.03.05"
        assert manifest.generated_at == "2024-03-05T12:30:00+00:00"
        assert set(manifest.docs) == set(full_registry.ids())

        wire = manifest.to_wire()
        assert set(wire) == {"packVersion", "generatedAt", "docs", "tree", "relations"}
        assert set(wire["relations"]["nextPrev"]) == {UNIT1_ID, UNIT2_ID}

    def test_leaves_resolve(self, full_registry: Registry):
        manifest = assemble_manifest(full_registry, build_relations(full_registry), now=NOW)
        for root in manifest.tree:
            for node in root.walk():
                if node.kind == NodeKind.LEAF:
                    assert node.doc_id in manifest.docs

    def test_integrity_error(self, full_registry: Registry):
        graph = RelationGraph(next_prev={UNIT1_ID: Relation(next="nowhere")})
        with pytest.raises(IntegrityError) as exc:
            assemble_manifest(full_registry, graph, now=NOW)
        assert exc.value.errors

    def test_strict_hubs_pass_with_synthesis(self, full_registry: Registry):
        manifest = assemble_manifest(
            full_registry, build_relations(full_registry), now=NOW, strict_hubs=True,
        )
        assert manifest.tree
