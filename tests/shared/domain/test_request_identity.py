import pytest
from pydantic import ValidationError
from shared.errors import InvalidIdentity
from shared.identity import RequestIdentity

HEADERS = {"X-User-Id": "user-1", "X-User-Email": "jane@example.com", "X-User-Roles": "ROLE_USER, role_admin"}


class TestFromHeaders:
    def test_full_header_set(self):
        identity = RequestIdentity.from_headers(HEADERS)
        assert identity.user_id == "user-1"
        assert identity.email == "jane@example.com"
        assert identity.roles == frozenset({"USER", "ADMIN"})

    def test_header_names_are_case_insensitive(self):
        identity = RequestIdentity.from_headers({k.lower(): v for k, v in HEADERS.items()})
        assert identity.user_id == "user-1"

    def test_no_headers_is_anonymous(self):
        assert RequestIdentity.from_headers({}) is None

    @pytest.mark.parametrize("missing", ["X-User-Id", "X-User-Email", "X-User-Roles"])
    def test_partial_headers_rejected(self, missing):
        headers = {k: v for k, v in HEADERS.items() if k != missing}
        with pytest.raises(InvalidIdentity):
            RequestIdentity.from_headers(headers)

    @pytest.mark.parametrize(
        "header,value",
        [
            ("X-User-Id", "   "),
            ("X-User-Email", "jane"),
            ("X-User-Email", "jane@localhost"),
            ("X-User-Roles", " , "),
        ],
    )
    def test_malformed_headers_rejected(self, header, value):
        with pytest.raises(InvalidIdentity):
            RequestIdentity.from_headers({**HEADERS, header: value})


class TestIdentity:
    def test_has_role_ignores_case(self):
        identity = RequestIdentity.from_headers(HEADERS)
        assert identity.has_role("admin")
        assert not identity.has_role("DELIVERY_ADMIN")

    def test_immutable(self):
        identity = RequestIdentity.from_headers(HEADERS)
        with pytest.raises(ValidationError):
            identity.user_id = "someone-else"

    def test_forwarded_headers(self):
        headers = RequestIdentity.from_headers(HEADERS).to_headers()
        assert headers == {"X-User-Id": "user-1", "X-User-Email": "jane@example.com", "X-User-Roles": "ADMIN,USER"}

    def test_json_round_trip(self):
        identity = RequestIdentity.from_headers(HEADERS)
        assert RequestIdentity.from_json(identity.to_json()) == identity

    def test_from_empty_json(self):
        assert RequestIdentity.from_json(None) is None
        assert RequestIdentity.from_json("") is None
