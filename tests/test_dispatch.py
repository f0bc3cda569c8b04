from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import pytest
from pptx import Presentation

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from brandeck import registry  # noqa: E402
from brandeck.dispatch import (  # noqa: E402
    DispatchPolicy,
    describe_templates,
    generate,
    list_available_slide_methods,
)
from brandeck.errors import (  # noqa: E402
    ConfigValidationError,
    InvalidSlideParams,
    MalformedTable,
    SlideRenderError,
    UnknownPresentationType,
    UnknownSlideMethod,
)


def _pptx_files(directory: Path) -> list[Path]:
    return sorted(directory.glob("*.pptx"))


def test_single_title_slide_deck(tmp_path: Path) -> None:
    result = generate(
        "corporate",
        {"organisation": "Acme"},
        [{"method": "createTitleSlide", "params": ["Growth", "Strategy", "2026"]}],
        output_dir=tmp_path,
    )
    assert result.slide_count == 1
    assert result.filename.endswith(".pptx")
    assert result.filename.startswith("corporate_Acme_")
    assert result.path == tmp_path / result.filename
    assert result.size == result.path.stat().st_size
    assert result.warnings == []


def test_n_instructions_give_n_slides_in_order(tmp_path: Path) -> None:
    instructions = [{"method": "createTitleSlide", "params": [f"Slide {i}"]} for i in range(4)]
    result = generate("investment", None, instructions, output_dir=tmp_path)
    assert result.slide_count == 4

    prs = Presentation(str(result.path))
    headlines = [
        next(shape.text_frame.text for shape in slide.shapes if shape.has_text_frame and shape.text_frame.text.startswith("Slide"))
        for slide in prs.slides
    ]
    assert headlines == ["Slide 0", "Slide 1", "Slide 2", "Slide 3"]


def test_malformed_table_aborts_without_file(tmp_path: Path) -> None:
    instructions = [
        {"method": "createTitleSlide", "params": ["Deck"]},
        {"method": "createTableSlide", "params": ["T", ["A", "B"], [["1", "2"], ["3"]]]},
    ]
    with pytest.raises(MalformedTable) as exc:
        generate("corporate", {}, instructions, output_dir=tmp_path)

    assert exc.value.index == 1
    assert exc.value.method == "createTableSlide"
    assert "slides[1]" in str(exc.value)
    assert _pptx_files(tmp_path) == []


def test_lenient_policy_skips_unknown_method(tmp_path: Path) -> None:
    result = generate(
        "corporate",
        {},
        [
            {"method": "doesNotExist", "params": []},
            {"method": "createKeyMessages", "params": ["Key Messages", ["a", "b"]]},
        ],
        output_dir=tmp_path,
        policy=DispatchPolicy.LENIENT,
    )
    assert result.slide_count == 1
    assert len(result.warnings) == 1
    assert "doesNotExist" in result.warnings[0]
    assert len(_pptx_files(tmp_path)) == 1


def test_lenient_policy_skips_malformed_table(tmp_path: Path) -> None:
    result = generate(
        "investment",
        {},
        [
            {"method": "createTableSlide", "params": ["T", ["A"], [["1", "2"]]]},
            {"method": "createSectionSlide", "params": ["Context"]},
        ],
        output_dir=tmp_path,
        policy="lenient",
    )
    assert result.slide_count == 1
    assert "Table row 0" in result.warnings[0]


def test_strict_policy_rejects_unknown_method(tmp_path: Path) -> None:
    with pytest.raises(UnknownSlideMethod) as exc:
        generate(
            "corporate",
            {},
            [{"method": "createTitleSlide", "params": ["x"]}, {"method": "doesNotExist"}],
            output_dir=tmp_path,
        )
    assert exc.value.index == 1
    assert _pptx_files(tmp_path) == []


def test_brand_exclusive_method_is_unknown_for_other_brand(tmp_path: Path) -> None:
    with pytest.raises(UnknownSlideMethod):
        generate("corporate", {}, [{"method": "createCaseStudy", "params": ["T", {"company": "X"}]}], output_dir=tmp_path)


def test_wrong_arity_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(InvalidSlideParams) as exc:
        generate("corporate", {}, [{"method": "createExecutiveSummary", "params": ["only title"]}], output_dir=tmp_path)
    assert "expects 2 params" in str(exc.value)

    with pytest.raises(InvalidSlideParams):
        generate("corporate", {}, [{"method": "createTimeline", "params": ["T", "not a list"]}], output_dir=tmp_path)


def test_unknown_presentation_type(tmp_path: Path) -> None:
    with pytest.raises(UnknownPresentationType):
        generate("neon", {}, [{"method": "createTitleSlide", "params": ["x"]}], output_dir=tmp_path)
    assert _pptx_files(tmp_path) == []


def test_invalid_config_is_reported(tmp_path: Path) -> None:
    with pytest.raises(ConfigValidationError) as exc:
        generate("corporate", {"primaryColor": "blue"}, [], output_dir=tmp_path)
    assert "primaryColor" in str(exc.value)


def test_method_aliases_and_key_messages_shorthand(tmp_path: Path) -> None:
    result = generate(
        "investment",
        {},
        [
            {"method": "createDataTable", "params": ["T", ["A"], [["1"]]]},
            {"method": "createSectionDivider", "params": ["Context"]},
            {"method": "createKeyMessages", "params": [["one", "two"]]},
        ],
        output_dir=tmp_path,
    )
    assert result.slide_count == 3


def test_unexpected_builder_error_is_wrapped(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(theme, config, *args):
        raise RuntimeError("boom")

    entry = registry.lookup("corporate", "createTitleSlide")
    monkeypatch.setitem(registry._BY_NAME, "createTitleSlide", dataclasses.replace(entry, build=explode))

    with pytest.raises(SlideRenderError) as exc:
        generate("corporate", {}, [{"method": "createTitleSlide", "params": ["x"]}], output_dir=tmp_path)

    assert exc.value.method == "createTitleSlide"
    assert exc.value.index == 0
    assert isinstance(exc.value.cause, RuntimeError)
    assert "RuntimeError: boom" in str(exc.value)


def test_list_available_slide_methods() -> None:
    corporate = list_available_slide_methods("corporate")
    investment = list_available_slide_methods("investment")
    assert "createTableSlide" in corporate
    assert "createCaseStudy" not in corporate
    assert {"createSectionSlide", "createNumberedFramework", "createCaseStudy"} <= set(investment)
    with pytest.raises(UnknownPresentationType):
        list_available_slide_methods("neon")


def test_describe_templates() -> None:
    templates = {t["type"]: t for t in describe_templates()}
    assert set(templates) == {"corporate", "investment"}
    assert templates["investment"]["methods"][0] == "createTitleSlide"
    assert templates["corporate"]["description"]
