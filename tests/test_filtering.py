import pytest

from medfinder.core.filtering import filter_results, quick_filter
from medfinder.models import FilterConfig, FilteredResults, MedicalProfessional


def make(name="Dr. Anil Kumar", address="5 Lake Rd", workplace="City Clinic", phone="080 1234", specialty="surgeon"):
    return MedicalProfessional(
        name=name,
        address=address,
        workplace=workplace,
        phone=phone,
        specialty=specialty,
        latitude=12.9,
        longitude=77.6,
        distance=1.0,
    )


@pytest.fixture
def records():
    return [
        make(name="A"),
        make(name="B", phone=""),
        make(name="C", workplace="Apollo Health"),
        make(name="D", address="Cloud Nine Towers"),
        make(name="E", workplace=""),
    ]


def test_identity_config_includes_everything(records):
    result = filter_results(records, FilterConfig(exclude_empty_fields=False, excluded_keywords=()))
    assert result.included == records
    assert result.excluded == []


def test_partition_has_no_loss_or_duplicates(records):
    result = filter_results(records, FilterConfig(exclude_empty_fields=True, excluded_keywords=("apollo",)))

    combined = result.included + result.excluded
    assert len(combined) == len(records)
    assert sorted(p.name for p in combined) == sorted(p.name for p in records)


def test_end_to_end_scenario():
    a = make(name="A")
    b = make(name="B", phone="")
    c = make(name="C", workplace="Apollo Health")

    result = filter_results([a, b, c], FilterConfig(exclude_empty_fields=True, excluded_keywords=("apollo",)))

    assert result.included == [a]
    assert result.excluded == [b, c]


def test_empty_fields_kept_when_flag_off(records):
    result = filter_results(records, FilterConfig(exclude_empty_fields=False, excluded_keywords=("apollo",)))
    assert [p.name for p in result.included] == ["A", "B", "D", "E"]
    assert [p.name for p in result.excluded] == ["C"]


def test_keyword_matching_is_case_insensitive_substring():
    record = make(name="Dr. X", workplace="APOLLO Spectra")
    assert filter_results([record], FilterConfig(False, ("Apollo",))).excluded == [record]
    assert filter_results([record], FilterConfig(False, ("spectr",))).excluded == [record]


def test_keyword_matching_does_not_ignore_spaces():
    record = make(workplace="Cloud Nine Clinic")

    assert filter_results([record], FilterConfig(False, ("cloudnine",))).included == [record]
    assert filter_results([record], FilterConfig(False, ("cloud nine",))).excluded == [record]


def test_keyword_does_not_match_phone_or_specialty():
    record = make(phone="apollo-line", specialty="apollo")
    assert filter_results([record], FilterConfig(False, ("apollo",))).included == [record]


def test_empty_keyword_list_excludes_nothing(records):
    result = filter_results(records, FilterConfig(exclude_empty_fields=False, excluded_keywords=[]))
    assert result.excluded == []


def test_quick_filter_empty_term_is_identity(records):
    filtered = filter_results(records, FilterConfig())
    assert quick_filter(filtered, "") is filtered
    assert quick_filter(filtered, "   ") is filtered
    assert quick_filter(filtered, None) is filtered


def test_quick_filter_narrows_included_only():
    kept = make(name="Dr. Rao", workplace="Heart Care")
    other = make(name="Dr. Sen", workplace="Bone Clinic", specialty="orthopedist")
    excluded = make(name="Dr. Bose", workplace="Apollo Heart")
    filtered = FilteredResults(included=[kept, other], excluded=[excluded])

    narrowed = quick_filter(filtered, "HEART")

    assert narrowed.included == [kept]
    assert narrowed.excluded == [excluded]


def test_quick_filter_matches_specialty_and_address():
    by_specialty = make(name="One", specialty="dermatologist")
    by_address = make(name="Two", address="Derm Lane")
    neither = make(name="Three")
    filtered = FilteredResults(included=[by_specialty, by_address, neither])

    assert quick_filter(filtered, "derm").included == [by_specialty, by_address]


def test_quick_filter_then_clear_restores_filter_output(records):
    config = FilterConfig()
    filtered = filter_results(records, config)

    quick_filter(filtered, "A")
    restored = quick_filter(filter_results(records, config), "")

    assert restored.included == filtered.included
    assert restored.excluded == filtered.excluded
