"""Tests for sfquery.models -- wire shapes, failure codes and config validation."""

from __future__ import annotations

import pydantic
import pytest

from sfquery.models import AuthFailure, ClientConfig, Credential, QueryFailure, QueryResult


class TestAuthFailure:
    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            ("invalid_client_id", AuthFailure.INVALID_CLIENT_ID),
            ("invalid_client_credentials", AuthFailure.INVALID_CLIENT_SECRET),
            ("invalid_grant", AuthFailure.INVALID_GRANT),
            ("inactive_user", AuthFailure.INVALID_USER),
            ("inactive_org", AuthFailure.ORG_UNAVAILABLE),
            ("rate_limit_exceeded", AuthFailure.RATE_LIMIT_EXCEEDED),
        ],
    )
    def test_known_codes(self, code: str, expected: AuthFailure) -> None:
        assert AuthFailure.from_code(code) is expected

    @pytest.mark.parametrize("code", ["", "token_unavailable", "INVALID_GRANT", "server_error"])
    def test_unknown_codes(self, code: str) -> None:
        assert AuthFailure.from_code(code) is AuthFailure.TOKEN_UNAVAILABLE

    def test_every_kind_has_description(self) -> None:
        for failure in AuthFailure:
            assert failure.description


class TestCredential:
    def test_is_immutable(self) -> None:
        credential = Credential(
            access_token="tok",
            token_type="Bearer",
            instance_url="https://na1.example.com/",
            signature="sig",
            issued_at="1278448832702",
        )
        with pytest.raises(pydantic.ValidationError):
            credential.access_token = "other"  # type: ignore[misc]

    def test_missing_field_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Credential.model_validate({"access_token": "tok", "token_type": "Bearer"})


class TestQueryResult:
    @pytest.mark.parametrize(
        "result",
        [
            QueryResult(total_size=1, done=True, records=[{"id": "12345"}]),
            QueryResult(total_size=0, done=True, records=[]),
            QueryResult(
                total_size=3,
                done=False,
                records=[{"Id": "a", "Owner": {"Name": "x"}}, None, 7],
            ),
        ],
    )
    def test_wire_round_trip(self, result: QueryResult) -> None:
        assert QueryResult.model_validate_json(result.model_dump_json()) == result

    def test_record_order_preserved(self) -> None:
        body = '{"total_size": 3, "done": true, "records": [{"n": 3}, {"n": 1}, {"n": 2}]}'
        result = QueryResult.model_validate_json(body)
        assert [r["n"] for r in result.records] == [3, 1, 2]

    def test_negative_total_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            QueryResult(total_size=-1, done=True)


class TestQueryFailure:
    def test_from_wire_attaches_status(self) -> None:
        failure = QueryFailure.from_wire(b'{"message": "expired", "fields": []}', 401)
        assert failure == QueryFailure(message="expired", status_code=401, fields=[])

    def test_from_wire_ignores_body_status(self) -> None:
        failure = QueryFailure.from_wire(
            b'{"message": "m", "fields": ["Name"], "status_code": 999}', 400
        )
        assert failure.status_code == 400
        assert failure.fields == ["Name"]

    def test_from_wire_rejects_other_shapes(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            QueryFailure.from_wire(b'{"error": "nope"}', 500)


class TestClientConfig:
    def test_defaults(self) -> None:
        config = ClientConfig(
            login_url="u", version="v", client_id="i", client_secret="s",
            username="n", password="p",
        )
        assert config.attempt_limit == 3
        assert config.timeout == 30.0
        assert config.verify_ssl is True

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            ClientConfig.model_validate(
                {
                    "login_url": "u", "version": "v", "client_id": "i",
                    "client_secret": "s", "username": "n", "password": "p",
                    "pasword": "typo",
                }
            )

    def test_negative_attempt_limit_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            ClientConfig(
                login_url="u", version="v", client_id="i", client_secret="s",
                username="n", password="p", attempt_limit=-1,
            )
