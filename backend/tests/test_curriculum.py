import pytest
from pydantic import ValidationError

from maxlik.curriculum import SYLLABUS, build_syllabus, get_module, list_modules
from maxlik.formula import compose_formula, palette


def test_syllabus_is_ordered_and_well_formed():
    assert [m.id for m in SYLLABUS] == sorted(m.id for m in SYLLABUS)
    for module in SYLLABUS:
        assert module.topics
        assert module.cases


def test_get_module():
    assert get_module(3).title == "Statistical Tests"
    assert "ABAG Wastewater" in [c.title for c in get_module(3).cases]
    with pytest.raises(KeyError):
        get_module(0)


def test_list_modules_returns_a_copy():
    modules = list_modules()
    modules.pop()
    assert len(list_modules()) == len(SYLLABUS)


def test_modules_are_immutable():
    with pytest.raises(ValidationError):
        SYLLABUS[0].title = "Renamed"


def test_build_syllabus_rejects_empty_topics_or_cases():
    case = {"title": "c", "description": "d", "data_points": []}
    with pytest.raises(ValidationError):
        build_syllabus([{"id": 1, "title": "t", "topics": [], "cases": [case]}])
    with pytest.raises(ValidationError):
        build_syllabus([{"id": 1, "title": "t", "topics": ["x"], "cases": []}])


def test_build_syllabus_rejects_duplicate_ids_and_sorts():
    case = {"title": "c", "description": "d"}
    with pytest.raises(ValueError):
        build_syllabus([
            {"id": 1, "title": "a", "topics": ["x"], "cases": [case]},
            {"id": 1, "title": "b", "topics": ["y"], "cases": [case]},
        ])
    modules = build_syllabus([
        {"id": 2, "title": "b", "topics": ["y"], "cases": [case]},
        {"id": 1, "title": "a", "topics": ["x"], "cases": [case]},
    ])
    assert [m.id for m in modules] == [1, 2]


def test_compose_formula():
    assert compose_formula(["β0", "+", "β1", "X"]) == "β0 + β1 X"
    assert compose_formula([]) == ""
    assert "Mean" in palette()
    with pytest.raises(ValueError):
        compose_formula(["β0", "%"])
