# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
from cca.analyzer import ClassUnit, FunctionUnit
from cca.readability import evaluate_readability

WELL_INDENTED_CLASS = "\n".join(
    [
        "class Inventory {",
        "    count() {",
        "        return this.items.length;",
        "    }",
        "}",
    ]
)


def _function(name: str | None, source_text: str) -> FunctionUnit:
    return FunctionUnit(
        name=name,
        source_text=source_text,
        start_offset=0,
        end_offset=max(1, len(source_text)),
    )


def test_ph2_read_001_pascal_case_name_with_consistent_indent_scores_full() -> None:
    unit = ClassUnit(
        name="Inventory",
        source_text=WELL_INDENTED_CLASS,
        start_offset=0,
        end_offset=len(WELL_INDENTED_CLASS),
    )

    assert evaluate_readability(unit) == 100


def test_ph2_read_002_short_lowercase_name_with_flat_indent_scores_55() -> None:
    unit = _function("a", "function a() {\nreturn 1;\n}")

    assert evaluate_readability(unit) == 55


def test_ph2_read_003_all_four_penalties_score_35() -> None:
    unit = _function("a_", "function a_() {\nreturn 1;\n}")

    assert evaluate_readability(unit) == 35


def test_ph2_read_004_missing_name_is_penalized_as_invalid_and_short() -> None:
    unit = _function(None, WELL_INDENTED_CLASS)

    assert evaluate_readability(unit) == 70


def test_ph2_read_005_deep_indentation_is_penalized() -> None:
    text = "\n".join(
        ["function Nested() {"] + ["            step();"] * 4 + ["}"]
    )
    unit = _function("Nested", text)

    assert evaluate_readability(unit) == 85


def test_ph2_read_006_score_stays_within_bounds() -> None:
    for name in (None, "", "x", "_", "lower_case", "Fine", "ALLCAPS"):
        for text in ("", "x", WELL_INDENTED_CLASS, " " * 40):
            score = evaluate_readability(_function(name, text))
            assert 0 <= score <= 100
