from selectorfinder.models import NTH_CHILD_PENALTY, Identifier
from selectorfinder.scoring import BASE_PENALTIES, path_penalty, penalty_for, sort_identifiers, sort_paths


def _ident(token: str, kind: str, level: int = 0) -> Identifier:
    return Identifier(token=token, penalty=penalty_for(kind), kind=kind, level=level)  # type: ignore[arg-type]


def test_penalty_table_orders_identifier_kinds() -> None:
    assert BASE_PENALTIES == {"id": 0.0, "attribute": 0.5, "class_name": 1.0, "tag_name": 2.0, "any": 3.0}
    assert NTH_CHILD_PENALTY == 1.0
    assert _ident(".a", "class_name").with_nth_child(3).penalty == 2.0


def test_equal_penalties_keep_extraction_order() -> None:
    identifiers = [_ident("div", "tag_name"), _ident(".b", "class_name"), _ident(".a", "class_name"), _ident("#x", "id")]

    assert [item.token for item in sort_identifiers(identifiers)] == ["#x", ".b", ".a", "div"]


def test_paths_sort_by_summed_penalty() -> None:
    cheap = (_ident(".a", "class_name"), _ident("#x", "id", 1))
    middle = (_ident("li", "tag_name"), _ident("#x", "id", 1))
    tie = (_ident(".b", "class_name"), _ident(".c", "class_name", 1))

    assert path_penalty(cheap) == 1.0
    assert path_penalty(middle) == 2.0
    assert sort_paths([middle, tie, cheap]) == [cheap, middle, tie]
