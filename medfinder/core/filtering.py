"""Partitioning of search results into included and excluded records."""

from __future__ import annotations

from typing import Iterable, Optional

from medfinder.models import FilterConfig, FilteredResults, MedicalProfessional


def _has_empty_field(professional: MedicalProfessional) -> bool:
    return not (professional.name and professional.address and professional.workplace and professional.phone)


def _matched_keyword(professional: MedicalProfessional, keywords: Iterable[str]) -> Optional[str]:
    haystacks = (
        (professional.name or "").lower(),
        (professional.address or "").lower(),
        (professional.workplace or "").lower(),
    )
    for keyword in keywords:
        needle = keyword.lower()
        if any(needle in text for text in haystacks):
            return keyword
    return None


def is_excluded(professional: MedicalProfessional, config: FilterConfig) -> bool:
    if config.exclude_empty_fields and _has_empty_field(professional):
        return True
    return _matched_keyword(professional, config.excluded_keywords) is not None


def filter_results(results: Iterable[MedicalProfessional], config: FilterConfig) -> FilteredResults:
    """Split ``results`` per ``config``.

    Empty-field exclusion is checked first, then plain lowercase substring
    matching of each keyword against name, address and workplace. Every
    input record lands in exactly one list and input order is kept.
    """
    filtered = FilteredResults()
    for professional in results:
        if is_excluded(professional, config):
            filtered.excluded.append(professional)
        else:
            filtered.included.append(professional)
    return filtered


def matches_term(professional: MedicalProfessional, term: str) -> bool:
    needle = term.lower()
    return any(
        needle in (value or "").lower()
        for value in (professional.name, professional.specialty, professional.workplace, professional.address)
    )


def quick_filter(filtered: FilteredResults, term: Optional[str]) -> FilteredResults:
    """Narrow the included list to records mentioning ``term``; excluded passes through."""
    term = (term or "").strip()
    if not term:
        return filtered
    return FilteredResults(
        included=[p for p in filtered.included if matches_term(p, term)],
        excluded=filtered.excluded,
    )
