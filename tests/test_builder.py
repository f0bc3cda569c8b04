from __future__ import annotations

import re
import sys
from pathlib import Path

import pytest
from pptx import Presentation
from pptx.util import Inches

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from brandeck.builder import PresentationBuilder  # noqa: E402
from brandeck.errors import DeckFinalized, MalformedTable, SerializationError, UnknownSlideMethod  # noqa: E402
from brandeck.writer import PptxWriter  # noqa: E402


def test_operations_append_in_call_order() -> None:
    builder = PresentationBuilder("corporate", {"organisation": "Acme"})
    builder.create_title_slide("Growth", "Plan", "2026")
    builder.create_executive_summary("Summary", [{"value": "£1M", "label": "Revenue"}])
    builder.create_table_slide("Table", ["A", "B"], [["1", "2"]])
    builder.create_key_messages("Key Messages", ["Ship it"])

    assert builder.slide_count == 4
    assert builder.deck.kinds == ["title", "executive-summary", "table", "key-messages"]


def test_failed_operation_leaves_deck_untouched() -> None:
    builder = PresentationBuilder("corporate")
    builder.create_title_slide("Deck")
    with pytest.raises(MalformedTable):
        builder.create_table_slide("Broken", ["A", "B"], [["1"]])
    assert builder.slide_count == 1


def test_brand_exclusive_methods_are_not_offered_elsewhere() -> None:
    corporate = PresentationBuilder("corporate")
    with pytest.raises(UnknownSlideMethod):
        corporate.create_section_slide("Context")
    assert "createCaseStudy" not in corporate.available_methods()

    investment = PresentationBuilder("investment")
    investment.create_section_slide("Context")
    assert investment.deck.kinds == ["section"]


def test_primary_color_override_applies_to_theme() -> None:
    builder = PresentationBuilder("corporate", {"primaryColor": "#123456"})
    assert builder.theme.palette["primary"] == "123456"
    slide = builder.create_key_messages("Key Messages", ["a"])
    assert slide.background == "123456"


def test_save_writes_pptx_and_finalizes(tmp_path: Path) -> None:
    builder = PresentationBuilder("corporate", {"organisation": "Acme & Sons Ltd."})
    builder.create_title_slide("Deck")
    builder.create_content_slide("Agenda", ["One", "Two"])
    builder.create_framework_slide("Framework", [{"title": "A", "content": "x", "color": "accent"}])
    builder.create_timeline("Timeline", [{"period": "Q1", "title": "Start"}, {"period": "Q2", "title": "Finish"}])
    builder.create_next_steps("Next Steps", [{"phase": "Now", "action": "Approve", "owner": "Board"}])

    filename = builder.save(tmp_path)

    assert re.fullmatch(r"corporate_Acme_Sons_Ltd_\d{8}T\d{6}Z_[0-9a-f]{8}\.pptx", filename)
    prs = Presentation(str(tmp_path / filename))
    assert len(prs.slides) == 5
    assert prs.slide_width == Inches(10)
    assert [p.name for p in tmp_path.iterdir()] == [filename]

    with pytest.raises(DeckFinalized):
        builder.create_title_slide("Too late")
    with pytest.raises(DeckFinalized):
        builder.save(tmp_path)
    assert builder.slide_count == 5


def test_investment_deck_uses_widescreen_page(tmp_path: Path) -> None:
    builder = PresentationBuilder("investment")
    builder.create_numbered_framework("Approach", ["Source", {"header": "Scale", "content": "Grow"}], "3x")
    builder.create_case_study(
        "Case Study",
        {"company": "Widget Co", "entry": {"date": "2019", "value": "£20M"}, "return": "4.0x"},
    )
    filename = builder.save(tmp_path)
    prs = Presentation(str(tmp_path / filename))
    assert prs.slide_width == Inches(13.333)
    assert len(prs.slides) == 2
    texts = [shape.text_frame.text for shape in prs.slides[1].shapes if shape.has_text_frame]
    assert "Widget Co" in texts


def test_table_renders_as_native_table(tmp_path: Path) -> None:
    builder = PresentationBuilder("corporate")
    builder.create_table_slide("Table", ["Metric", "Value"], [["Revenue", {"value": "+6%", "bold": True}]])
    filename = builder.save(tmp_path)

    slide = Presentation(str(tmp_path / filename)).slides[0]
    tables = [shape.table for shape in slide.shapes if shape.has_table]
    assert len(tables) == 1
    assert tables[0].cell(0, 0).text == "Metric"
    assert tables[0].cell(1, 1).text == "+6%"


class _BrokenWriter(PptxWriter):
    def build(self, deck):
        raise RuntimeError("disk on fire")


def test_serialization_failure_leaves_no_file(tmp_path: Path) -> None:
    builder = PresentationBuilder("corporate", writer=_BrokenWriter())
    builder.create_title_slide("Deck")

    with pytest.raises(SerializationError) as exc:
        builder.save(tmp_path)

    assert "disk on fire" in str(exc.value)
    assert list(tmp_path.iterdir()) == []
    assert not builder.finalized


class _TruncatedSave:
    def __init__(self):
        self.partial_path = None

    def save(self, fh):
        fh.write(b"PK\x03\x04partial")
        fh.flush()
        self.partial_path = Path(fh.name)
        raise OSError("disk full")


class _MidWriteFailure(PptxWriter):
    def __init__(self):
        self.document = _TruncatedSave()

    def build(self, deck):
        return self.document


def test_failure_during_write_removes_partial_file(tmp_path: Path) -> None:
    writer = _MidWriteFailure()
    builder = PresentationBuilder("investment", writer=writer)
    builder.create_section_slide("Context")

    with pytest.raises(SerializationError) as exc:
        builder.save(tmp_path)

    assert "disk full" in str(exc.value)
    assert writer.document.partial_path is not None
    assert writer.document.partial_path.parent == tmp_path
    assert not writer.document.partial_path.exists()
    assert list(tmp_path.iterdir()) == []


def test_us_spelling_applies_to_built_in_labels() -> None:
    builder = PresentationBuilder("corporate", {"spelling": "US"})
    assert builder.config.organisation == "Your Organization"

    content = builder.create_content_slide("Agenda", ["One"])
    assert "YOUR ORGANIZATION" in content.texts()

    key_messages = builder.invoke("createKeyMessages", [["Ship it"]])
    assert "Key Messages" in key_messages.texts()

    uk = PresentationBuilder("corporate").create_content_slide("Agenda", ["One"])
    assert "YOUR ORGANISATION" in uk.texts()


def test_caller_organisation_is_not_respelled() -> None:
    builder = PresentationBuilder("investment", {"spelling": "US", "organisation": "Charity Organisation"})
    assert builder.config.organisation == "Charity Organisation"
