"""Tests des identifiants opaques."""

from __future__ import annotations

import pytest

from cms_backend.domain.errors import BadRequestError
from cms_backend.domain.identifiers import is_valid_id, new_id, validate_id


def test_new_id_is_valid() -> None:
    value = new_id()
    assert is_valid_id(value)
    assert validate_id(value) == value


@pytest.mark.parametrize(
    "value",
    ["", "abc", "A" * 32, "0" * 31, "0" * 33, "0" * 32 + "\n", " " + "0" * 32, None, 42],
)
def test_malformed_ids_are_rejected(value) -> None:
    assert not is_valid_id(value)
    with pytest.raises(BadRequestError):
        validate_id(value, "contentId")
