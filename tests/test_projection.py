"""Tests for text-slot enumeration, reading and writing."""

import pytest

from ooxml_textpatch import Flavor, StaleSlotError, Text, TextSlot, enumerate_slots, parse, serialize
from ooxml_textpatch.projection import read_text, write_text

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
P_NS = "http://schemas.openxmlformats.org/presentationml/2006/main"
MC_NS = "http://schemas.openxmlformats.org/markup-compatibility/2006"


def word_root(body: str):
    return parse(f'<w:document xmlns:w="{WORD_NS}"><w:body>{body}</w:body></w:document>'.encode()).root


def slide_root(body: str):
    return parse(
        f'<p:sld xmlns:a="{A_NS}" xmlns:p="{P_NS}" xmlns:mc="{MC_NS}">'
        f"<p:cSld><p:spTree>{body}</p:spTree></p:cSld></p:sld>".encode()
    ).root


class TestEnumerate:
    """Tests for enumerate_slots()."""

    def test_document_order(self):
        """Slots come out in document order with their text."""
        root = word_root(
            "<w:p><w:r><w:t>Hello</w:t></w:r><w:r><w:t> World</w:t></w:r></w:p>"
            "<w:p><w:r><w:t>Second</w:t></w:r></w:p>"
        )
        slots = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")
        assert [slot.original_text for slot in slots] == ["Hello", " World", "Second"]
        assert [slot.paragraph for slot in slots] == [0, 0, 1]
        assert [slot.index for slot in slots] == [0, 1, 2]
        assert slots[0].address == (0, 0, 0, 0)
        assert slots[1].address == (0, 0, 1, 0)
        assert all(slot.part == "word/document.xml" for slot in slots)

    def test_addresses_are_unique(self):
        """No two slots share an address."""
        root = word_root("<w:p><w:r><w:t>a</w:t><w:t>b</w:t></w:r></w:p>" * 3)
        slots = enumerate_slots(root, "docx", "word/document.xml")
        assert len({slot.address for slot in slots}) == len(slots) == 6

    def test_start_offsets_index(self):
        """start sets the index of the first slot."""
        root = word_root("<w:p><w:r><w:t>x</w:t></w:r></w:p>")
        slots = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml", start=5)
        assert slots[0].index == 5

    def test_empty_leaf_is_a_slot(self):
        """An empty text leaf is a slot with empty text."""
        root = word_root("<w:p><w:r><w:t/></w:r><w:r><w:t></w:t></w:r></w:p>")
        slots = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")
        assert [slot.original_text for slot in slots] == ["", ""]

    def test_runs_without_text_leaves(self):
        """Tabs, breaks and run properties are not slots."""
        root = word_root(
            '<w:p><w:r><w:rPr><w:b/></w:rPr><w:tab/><w:br/></w:r>'
            "<w:r><w:t>Only</w:t></w:r></w:p>"
        )
        slots = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")
        assert [slot.original_text for slot in slots] == ["Only"]

    def test_leaf_with_markup_children_skipped(self):
        """A leaf holding anything but plain text is not a slot."""
        root = word_root("<w:p><w:r><w:t>a<!--c-->b</w:t></w:r><w:r><w:t>ok</w:t></w:r></w:p>")
        slots = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")
        assert [slot.original_text for slot in slots] == ["ok"]

    def test_other_flavor_leaves_ignored(self):
        """Word leaves are not slots in a presentation and vice versa."""
        root = word_root("<w:p><w:r><w:t>Word</w:t></w:r></w:p>")
        assert enumerate_slots(root, Flavor.PRESENTATION, "ppt/slides/slide1.xml") == []

    def test_fallback_content_skipped(self):
        """mc:Fallback repeats mc:Choice content and is not enumerated."""
        root = slide_root(
            "<mc:AlternateContent>"
            "<mc:Choice Requires='a14'><p:sp><p:txBody><a:p><a:r><a:t>Choice</a:t></a:r></a:p>"
            "</p:txBody></p:sp></mc:Choice>"
            "<mc:Fallback><p:sp><p:txBody><a:p><a:r><a:t>Fallback</a:t></a:r></a:p>"
            "</p:txBody></p:sp></mc:Fallback>"
            "</mc:AlternateContent>"
        )
        slots = enumerate_slots(root, Flavor.PRESENTATION, "ppt/slides/slide1.xml")
        assert [slot.original_text for slot in slots] == ["Choice"]

    def test_presentation_paragraphs(self):
        """Paragraph ordinals count a:p elements across shapes."""
        root = slide_root(
            "<p:sp><p:txBody><a:p><a:r><a:t>T1</a:t></a:r></a:p></p:txBody></p:sp>"
            "<p:sp><p:txBody><a:p><a:r><a:t>B1</a:t></a:r><a:r><a:t>B2</a:t></a:r></a:p>"
            "<a:p><a:fld><a:t>F</a:t></a:fld></a:p></p:txBody></p:sp>"
        )
        slots = enumerate_slots(root, Flavor.PRESENTATION, "ppt/slides/slide1.xml")
        assert [(slot.original_text, slot.paragraph) for slot in slots] == [
            ("T1", 0),
            ("B1", 1),
            ("B2", 1),
            ("F", 2),
        ]


class TestReadWrite:
    """Tests for read_text() and write_text()."""

    def test_write_then_read(self):
        """Reading returns what was written."""
        root = word_root("<w:p><w:r><w:t>Old</w:t></w:r></w:p>")
        slot = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")[0]
        assert write_text(root, slot, "New", Flavor.WORD_PROCESSING) is True
        assert read_text(root, slot, Flavor.WORD_PROCESSING) == "New"
        assert slot.original_text == "Old"

    def test_write_same_text_is_noop(self):
        """Writing the current text does not modify the tree."""
        root = word_root("<w:p><w:r><w:t>Same</w:t></w:r></w:p>")
        before = serialize(root)
        slot = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")[0]
        assert write_text(root, slot, "Same", Flavor.WORD_PROCESSING) is False
        assert serialize(root) == before

    def test_write_only_touches_leaf_text(self):
        """Properties and siblings are unchanged by a write."""
        body = (
            '<w:p><w:pPr><w:jc w:val="center"/></w:pPr><w:r><w:rPr><w:b/></w:rPr>'
            "<w:t>Bold</w:t></w:r><w:r><w:t>Plain</w:t></w:r></w:p>"
        )
        root = word_root(body)
        slot = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")[0]
        write_text(root, slot, "Heavy", Flavor.WORD_PROCESSING)
        assert serialize(root).endswith(
            body.replace("Bold", "Heavy").encode() + b"</w:body></w:document>"
        )

    def test_write_into_empty_leaf(self):
        """An empty leaf gains a text node."""
        root = word_root("<w:p><w:r><w:t/></w:r></w:p>")
        slot = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")[0]
        write_text(root, slot, "Filled", Flavor.WORD_PROCESSING)
        assert read_text(root, slot, Flavor.WORD_PROCESSING) == "Filled"

    def test_write_empty_string(self):
        """Text can be cleared; the slot stays addressable."""
        root = word_root("<w:p><w:r><w:t>Gone</w:t></w:r></w:p>")
        slot = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")[0]
        assert write_text(root, slot, "", Flavor.WORD_PROCESSING) is True
        assert read_text(root, slot, Flavor.WORD_PROCESSING) == ""

    def test_word_preserves_outer_whitespace(self):
        """Word leaves get xml:space="preserve" for leading/trailing spaces."""
        root = word_root("<w:p><w:r><w:t>x</w:t></w:r></w:p>")
        slot = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")[0]
        write_text(root, slot, " padded ", Flavor.WORD_PROCESSING)
        leaf = root.children[0].children[0].children[0].children[0]
        assert leaf.attributes["xml:space"] == "preserve"
        assert leaf.children == [Text(" padded ")]

    def test_presentation_does_not_add_space_attribute(self):
        """DrawingML leaves keep whitespace without xml:space."""
        root = slide_root("<p:sp><p:txBody><a:p><a:r><a:t>x</a:t></a:r></a:p></p:txBody></p:sp>")
        slot = enumerate_slots(root, Flavor.PRESENTATION, "ppt/slides/slide1.xml")[0]
        write_text(root, slot, " y ", Flavor.PRESENTATION)
        assert b"xml:space" not in serialize(root)
        assert read_text(root, slot, Flavor.PRESENTATION) == " y "

    def test_invalid_characters_removed(self):
        """Control characters are stripped so the part stays well-formed."""
        root = word_root("<w:p><w:r><w:t>x</w:t></w:r></w:p>")
        slot = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")[0]
        write_text(root, slot, "a\x00b\x07c", Flavor.WORD_PROCESSING)
        assert read_text(root, slot, Flavor.WORD_PROCESSING) == "abc"
        parse(serialize(root))

    def test_special_characters_round_trip(self):
        """Markup characters in new text are escaped on serialization."""
        root = word_root("<w:p><w:r><w:t>x</w:t></w:r></w:p>")
        slot = enumerate_slots(root, Flavor.WORD_PROCESSING, "word/document.xml")[0]
        write_text(root, slot, "<b> & </b>", Flavor.WORD_PROCESSING)
        reparsed = parse(serialize(root)).root
        again = enumerate_slots(reparsed, Flavor.WORD_PROCESSING, "word/document.xml")[0]
        assert again.original_text == "<b> & </b>"

    def test_stale_address(self):
        """A slot that no longer resolves raises StaleSlotError."""
        root = word_root("<w:p><w:r><w:t>x</w:t></w:r></w:p>")
        slot = TextSlot("word/document.xml", (0, 5, 0, 0), "x")
        with pytest.raises(StaleSlotError):
            read_text(root, slot, Flavor.WORD_PROCESSING)

    def test_address_of_non_leaf(self):
        """An address pointing at a run is rejected."""
        root = word_root("<w:p><w:r><w:t>x</w:t></w:r></w:p>")
        slot = TextSlot("word/document.xml", (0, 0, 0), "x")
        with pytest.raises(StaleSlotError, match="w:t"):
            write_text(root, slot, "y", Flavor.WORD_PROCESSING)
