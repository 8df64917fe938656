from datetime import datetime, timedelta, timezone

import jwt
import pytest

from organiz.auth_service.utils import (
    EXPIRED,
    INVALID,
    MISSING,
    create_token,
    verify_token,
    verify_token_from_request,
)


@pytest.fixture(autouse=True)
def app_context(app):
    with app.app_context():
        yield


def issued_ago(mocker, delta):
    """Make create_token believe it is running `delta` in the past."""
    mock_dt = mocker.patch("organiz.auth_service.utils.datetime")
    mock_dt.now.return_value = datetime.now(timezone.utc) - delta


def test_create_token(settings):
    token = create_token(123, "admin@organiz.io", "admin")

    assert isinstance(token, str)

    # Decode to verify contents using the same secret
    payload = jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
    assert payload["sub"] == "123"
    assert payload["id"] == 123
    assert payload["email"] == "admin@organiz.io"
    assert payload["role"] == "admin"
    assert "exp" in payload
    assert "iat" in payload


def test_create_token_unknown_role():
    with pytest.raises(KeyError):
        create_token(1, "x@y.com", "superuser")


def test_verify_token():
    token = create_token(456, "p@events.com", "participant")

    result = verify_token(token)

    assert result.ok
    assert result.reason is None
    assert result.claims["id"] == 456
    assert result.claims["role"] == "participant"


def test_verify_token_missing():
    result = verify_token(None)
    assert not result.ok
    assert result.reason == MISSING


def test_verify_token_invalid():
    result = verify_token("invalid.token.here")
    assert not result.ok
    assert result.reason == INVALID
    assert result.claims == {}


def test_verify_token_wrong_secret():
    token = create_token(1, "p@events.com", "participant", secret="another_secret")
    assert verify_token(token).reason == INVALID


@pytest.mark.parametrize("role, age", [
    ("participant", timedelta(hours=9, minutes=1)),
    ("organizer", timedelta(hours=1, minutes=1)),
    ("admin", timedelta(hours=6, minutes=1)),
])
def test_verify_token_expired(mocker, role, age):
    issued_ago(mocker, age)
    token = create_token(1, "x@events.com", role)
    mocker.stopall()

    assert verify_token(token).reason == EXPIRED


def test_organizer_token_expires_before_participant(mocker):
    issued_ago(mocker, timedelta(hours=2))
    participant = create_token(1, "p@events.com", "participant")
    organizer = create_token(2, "o@events.com", "organizer")
    mocker.stopall()

    assert verify_token(participant).ok
    assert verify_token(organizer).reason == EXPIRED


def test_expired_token_forbidden_on_protected(client, mocker):
    issued_ago(mocker, timedelta(hours=10))
    token = create_token(1, "p@events.com", "participant")
    mocker.stopall()

    response = client.get("/protected", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 403
    assert response.get_json()["error"] == "Invalid or expired token"


def test_verify_token_from_request_valid(app):
    token = create_token(789, "o@events.com", "organizer")

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        claims, err, code = verify_token_from_request()
        assert claims["id"] == 789
        assert claims["role"] == "organizer"
        assert err is None
        assert code is None


def test_verify_token_from_request_missing_header(app):
    with app.test_request_context():
        claims, err, code = verify_token_from_request()
        assert claims is None
        assert code == 401
        assert err.json["error"] == "Access token required"


def test_verify_token_from_request_invalid_format(app):
    with app.test_request_context(headers={"Authorization": "InvalidFormat"}):
        claims, err, code = verify_token_from_request()
        assert claims is None
        assert code == 401


def test_verify_token_from_request_bad_signature(app):
    token = create_token(1, "p@events.com", "participant", secret="another_secret")

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        claims, err, code = verify_token_from_request()
        assert claims is None
        assert code == 403
        assert err.json["error"] == "Invalid or expired token"


def test_verify_token_from_request_wrong_role(app):
    token = create_token(111, "p@events.com", "participant")

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        claims, err, code = verify_token_from_request(required_roles=["admin"])
        assert claims is None
        assert code == 403
        assert err.json["error"] == "Permission denied"
        assert err.json["message"] == "Permission denied"
