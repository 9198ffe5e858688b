from __future__ import annotations

import pytest

from burgerhero.auth.models import Role, UserProfile, is_placeholder, parse_role


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("admin", Role.admin),
        ("ADMIN", Role.admin),
        (" Staff ", Role.staff),
        ("client", Role.client),
        ("superuser", Role.client),
        ("", Role.client),
        (None, Role.client),
        (42, Role.client),
    ],
)
def test_parse_role_is_total_and_case_insensitive(raw, expected) -> None:
    assert parse_role(raw) is expected


def test_persisted_profile_role_is_normalized_on_load() -> None:
    profile = UserProfile.from_dict({"id": "u1", "email": "a@b.c", "role": "ADMIN", "unknown": 1})
    assert profile.role is Role.admin
    assert profile.to_dict()["role"] == "admin"


@pytest.mark.parametrize("value", ["", "  ", "Herói", "N/A", "BH-PENDING", None])
def test_placeholders(value) -> None:
    assert is_placeholder(value)


@pytest.mark.parametrize("value", ["Ana", "HE123", "BH-7QK2ZP"])
def test_real_values_are_not_placeholders(value) -> None:
    assert not is_placeholder(value)
