"""
Unit tests for request validation.
Tests email presence/syntax checks, subDomain handling, and isSignIn parsing.
"""

import pytest

from link_mailer.errors import InvalidRequest
from link_mailer.services.request_validator import parse_email_request, parse_is_sign_in_flag


class TestParseEmailRequest:
    """Test body validation for POST /."""

    def test_valid_email_without_sub_domain(self):
        result = parse_email_request({"email": "user@example.com"})

        assert result.email == "user@example.com"
        assert result.sub_domain is None

    def test_valid_email_with_sub_domain(self):
        result = parse_email_request({"email": "user@example.com", "subDomain": "acme"})

        assert result.sub_domain == "acme"

    def test_missing_email_raises_required_error(self):
        """An absent email field is reported as missing, not invalid."""
        with pytest.raises(InvalidRequest) as exc_info:
            parse_email_request({"subDomain": "acme"})

        assert "missing required email field" in str(exc_info.value)

    def test_null_email_counts_as_missing(self):
        with pytest.raises(InvalidRequest) as exc_info:
            parse_email_request({"email": None})

        assert "missing" in str(exc_info.value)

    def test_empty_email_is_invalid_not_missing(self):
        """An empty string is present, so it fails syntax validation instead."""
        with pytest.raises(InvalidRequest) as exc_info:
            parse_email_request({"email": ""})

        assert "invalid email address" in str(exc_info.value)

    @pytest.mark.parametrize("email", ["not-an-email", "user@", "@example.com", "a b@example.com"])
    def test_malformed_email_raises_invalid(self, email):
        with pytest.raises(InvalidRequest) as exc_info:
            parse_email_request({"email": email})

        assert "invalid email address" in str(exc_info.value)

    @pytest.mark.parametrize("email", [
        '"john doe"@example.com',
        "user@foo.test",
        "user@intranet",
        "first.last+tag@sub.example.co.uk",
    ])
    def test_syntactically_valid_addresses_accepted(self, email):
        """Valid mailbox syntax passes even when the address is not publicly routable."""
        result = parse_email_request({"email": email})

        assert result.email == email

    @pytest.mark.parametrize("email", ["user@localhost", "user@printer.local", "user@host.invalid"])
    def test_reserved_domains_rejected(self, email):
        """Special-use names can never receive mail from the email provider."""
        with pytest.raises(InvalidRequest) as exc_info:
            parse_email_request({"email": email})

        assert "invalid email address" in str(exc_info.value)

    def test_non_string_email_raises_invalid(self):
        with pytest.raises(InvalidRequest) as exc_info:
            parse_email_request({"email": 42})

        assert "invalid email address" in str(exc_info.value)

    def test_non_object_body_raises(self):
        with pytest.raises(InvalidRequest) as exc_info:
            parse_email_request(["user@example.com"])

        assert "JSON object" in str(exc_info.value)

    def test_blank_sub_domain_treated_as_absent(self):
        result = parse_email_request({"email": "user@example.com", "subDomain": "   "})

        assert result.sub_domain is None

    @pytest.mark.parametrize("sub_domain", ["../admin", "a/b", "..", ".", "a\\b"])
    def test_path_like_sub_domain_rejected(self, sub_domain):
        with pytest.raises(InvalidRequest) as exc_info:
            parse_email_request({"email": "user@example.com", "subDomain": sub_domain})

        assert "single path segment" in str(exc_info.value)

    def test_non_string_sub_domain_rejected(self):
        with pytest.raises(InvalidRequest):
            parse_email_request({"email": "user@example.com", "subDomain": 7})

    def test_invalid_request_maps_to_400(self):
        with pytest.raises(InvalidRequest) as exc_info:
            parse_email_request({})

        assert exc_info.value.http_status_code == 400
        assert exc_info.value.status_text == "Invalid request."


class TestParseIsSignInFlag:
    """Test isSignIn query parameter parsing (query link mode)."""

    @pytest.mark.parametrize("raw", ["1", "t", "T", "TRUE", "true", "True"])
    def test_true_literals(self, raw):
        assert parse_is_sign_in_flag(raw) is True

    @pytest.mark.parametrize("raw", ["0", "f", "F", "FALSE", "false", "False"])
    def test_false_literals(self, raw):
        assert parse_is_sign_in_flag(raw) is False

    def test_absent_defaults_to_false(self):
        assert parse_is_sign_in_flag(None) is False

    @pytest.mark.parametrize("raw", ["", "yes", "maybe", "tRuE"])
    def test_unparsable_value_raises(self, raw):
        """Unparsable flags are surfaced instead of silently becoming False."""
        with pytest.raises(InvalidRequest) as exc_info:
            parse_is_sign_in_flag(raw)

        assert "isSignIn" in str(exc_info.value)
