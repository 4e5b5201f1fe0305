"""
Tests for email validation.
"""

import pytest

from modules.users.exceptions import InvalidEmailError
from modules.users.validation import is_disposable_email, normalize_email, validate_email


class TestValidateEmail:

    def test_normalises(self):
        assert validate_email("  Ada.Lovelace@Example.COM ") == "ada.lovelace@example.com"

    @pytest.mark.parametrize("email", ["", "   "])
    def test_required(self, email):
        with pytest.raises(InvalidEmailError, match="Email is required"):
            validate_email(email)

    @pytest.mark.parametrize("email", [
        "ada", "ada@", "ada@example", "@example.com",
        "ada..lovelace@example.com", "ada@exa mple.com",
    ])
    def test_bad_format(self, email):
        with pytest.raises(InvalidEmailError, match="valid email format"):
            validate_email(email)

    def test_plus_address_kept(self):
        assert validate_email("Ada+News@Example.com") == "ada+news@example.com"

    def test_disposable(self):
        with pytest.raises(InvalidEmailError) as exc_info:
            validate_email("someone@yopmail.com")
        assert exc_info.value.code == "INVALID_EMAIL"


class TestIsDisposableEmail:

    @pytest.mark.parametrize("email", [
        "a@mailinator.com",
        "a@eu.mailinator.com",
        "a@my-tempbox.net",
        "a@burnermail.io",
        "a@x1.io",
    ])
    def test_disposable(self, email):
        assert is_disposable_email(email) is True

    @pytest.mark.parametrize("email", [
        "a@example.com",
        "a@gmail.com",
        "a@university.edu",
    ])
    def test_regular(self, email):
        assert is_disposable_email(email) is False


def test_normalize_email():
    assert normalize_email(" A@B.COM ") == "a@b.com"
