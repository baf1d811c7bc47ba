# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
from cca.analyzer import ClassUnit, FunctionUnit
from cca.heuristics import LexicalHeuristicPolicy

USER_SERVICE = "\n".join(
    [
        "class UserService {",
        "  createUser(data: any) {",
        "    this.userRepo.save(data);",
        "  }",
        "",
        "  sendWelcomeEmail(email: string) {",
        "    this.emailService.sendWelcomeEmail(email);",
        "  }",
        "}",
    ]
)


def _function(source_text: str) -> FunctionUnit:
    return FunctionUnit(
        name="Subject",
        source_text=source_text,
        start_offset=0,
        end_offset=len(source_text),
    )


def test_ph2_heur_001_user_service_handles_data_and_communication() -> None:
    unit = ClassUnit(
        name="UserService",
        source_text=USER_SERVICE,
        start_offset=0,
        end_offset=len(USER_SERVICE),
    )
    policy = LexicalHeuristicPolicy()

    assert policy.identify_responsibilities(unit) == ("data", "communication")
    assert policy.is_testable(unit) is True
    assert policy.has_side_effects(unit) is False


def test_ph2_heur_002_responsibility_match_is_case_insensitive() -> None:
    unit = _function("function Subject() { RENDER(); VALIDATE(); }")

    assert LexicalHeuristicPolicy().identify_responsibilities(unit) == (
        "ui",
        "validation",
    )


def test_ph2_heur_003_instantiation_breaks_testability_only() -> None:
    unit = _function("function Subject() { return new Date(); }")
    policy = LexicalHeuristicPolicy()

    assert policy.is_testable(unit) is False
    assert policy.has_side_effects(unit) is False


def test_ph2_heur_004_global_objects_break_testability_only() -> None:
    unit = _function("function Subject() { window.alert(1); }")
    policy = LexicalHeuristicPolicy()

    assert policy.is_testable(unit) is False
    assert policy.has_side_effects(unit) is False


def test_ph2_heur_005_console_output_breaks_both_checks() -> None:
    unit = _function("function Subject() { console.warn('x'); }")
    policy = LexicalHeuristicPolicy()

    assert policy.is_testable(unit) is False
    assert policy.has_side_effects(unit) is True


def test_ph2_heur_006_bare_assignment_breaks_both_checks() -> None:
    unit = _function("function Subject(value) {\n  globalCounter += value;\n}")
    policy = LexicalHeuristicPolicy()

    assert policy.is_testable(unit) is False
    assert policy.has_side_effects(unit) is True


def test_ph2_heur_007_field_assignment_is_a_side_effect_but_testable() -> None:
    unit = _function("function Subject(value) { this.count = value; }")
    policy = LexicalHeuristicPolicy()

    assert policy.is_testable(unit) is True
    assert policy.has_side_effects(unit) is True


def test_ph2_heur_008_custom_keywords_replace_taxonomy() -> None:
    policy = LexicalHeuristicPolicy(keywords={"cache": ("memo",), "io": ("fetch",)})
    unit = _function("function Subject() { return memo(fetch()); }")

    assert policy.identify_responsibilities(unit) == ("cache", "io")


def test_ph2_heur_009_comparisons_and_arrows_are_not_assignments() -> None:
    policy = LexicalHeuristicPolicy()
    comparison = _function("function Same(a, b) { return a === b || a == b; }")
    arrow = _function("function Double(xs) { return xs.map(x => x * 2); }")

    for unit in (comparison, arrow):
        assert policy.is_testable(unit) is True
        assert policy.has_side_effects(unit) is False


def test_ph2_heur_010_compound_assignment_still_counts() -> None:
    unit = _function("function Scale(total) {\n  total *= 2;\n  return total;\n}")

    assert LexicalHeuristicPolicy().has_side_effects(unit) is True
