"""
Variation 별로 적용할 필드 값을 고른다.

우선순위(구체적인 것부터):
    1. culture, segment 모두 일치
    2. culture 일치 + 필드의 segment 없음
    3. segment 일치 + 필드의 culture 없음
    4. 필드의 culture, segment 모두 없음(invariant)

처음으로 매칭된 단계의 필드들만 합친다. 단계를 넘어서 합치지 않으므로
culture 전용 값이 있으면 invariant 값을 대체한다.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Callable

from search_api.app.domain.models import IndexField, IndexValue, Variation

_VALUE_KINDS = tuple(IndexValue.model_fields)


def _same(a: str | None, b: str | None) -> bool:
    return a is not None and b is not None and a.lower() == b.lower()


def _tiers(variation: Variation) -> list[Callable[[IndexField], bool]]:
    tiers: list[Callable[[IndexField], bool]] = []
    if variation.culture is not None and variation.segment is not None:
        tiers.append(lambda f: _same(f.culture, variation.culture) and _same(f.segment, variation.segment))
    if variation.culture is not None:
        tiers.append(lambda f: _same(f.culture, variation.culture) and f.segment is None)
    if variation.segment is not None:
        tiers.append(lambda f: f.culture is None and _same(f.segment, variation.segment))
    tiers.append(lambda f: f.culture is None and f.segment is None)
    return tiers


def group_by_field_name(fields: Iterable[IndexField]) -> dict[str, list[IndexField]]:
    grouped: dict[str, list[IndexField]] = {}
    for field in fields:
        grouped.setdefault(field.field_name, []).append(field)
    return grouped


def merge_values(fields: Sequence[IndexField]) -> IndexValue:
    merged: dict[str, list | None] = {}
    for kind in _VALUE_KINDS:
        values = [v for f in fields for v in (getattr(f.value, kind) or [])]
        merged[kind] = values or None
    return IndexValue(**merged)


def resolve(
    fields_by_name: Mapping[str, Sequence[IndexField]],
    variation: Variation,
) -> list[IndexField]:
    """
    주어진 variation 에 적용되는 필드를 필드 이름당 하나로 합쳐 반환한다.

    Args:
        fields_by_name: 필드 이름별 IndexField 목록
        variation: 대상 (culture, segment)
    Returns:
        list[IndexField]: variation 태그가 붙은 병합 필드. 매칭이 없는 필드는 제외된다.
    """
    tiers = _tiers(variation)
    resolved: list[IndexField] = []
    for field_name, candidates in fields_by_name.items():
        for matches_tier in tiers:
            applicable = [f for f in candidates if matches_tier(f)]
            if applicable:
                resolved.append(IndexField(
                    field_name=field_name,
                    value=merge_values(applicable),
                    culture=variation.culture,
                    segment=variation.segment,
                ))
                break
    return resolved
