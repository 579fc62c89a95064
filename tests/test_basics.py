"""Basic unit tests for the getpushover package."""

from getpushover import (
    RelayClient,
    SessionManager,
    SyncPipeline,
    PushoverError,
    AuthError,
    RegistrationError,
    ConnectionError,
    ControlSignal,
    Message,
    SyncResult,
    __version__,
)
from getpushover.models.message import highest_id

from conftest import make_message


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert RelayClient is not None
    assert SessionManager is not None
    assert SyncPipeline is not None


def test_error_hierarchy():
    assert issubclass(AuthError, PushoverError)
    assert issubclass(RegistrationError, PushoverError)
    assert issubclass(ConnectionError, PushoverError)


def test_error_attributes():
    err = PushoverError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    err_with_details = RegistrationError("name taken", details={"name": ["has already been taken"]})
    assert err_with_details.code == "registration_error"
    assert err_with_details.details == {"name": ["has already been taken"]}

    assert AuthError("need code", code="twofa_required").needs_twofa
    assert not AuthError("bad password").needs_twofa

    http_err = PushoverError("http_error", "HTTP 400", details={"status_code": 400, "body": {}})
    assert http_err.status_code == 400
    assert err.status_code is None
    assert ConnectionError("stream dropped").code == "connection_error"


def test_signal_decoding():
    assert ControlSignal.decode("#") == (ControlSignal.KEEPALIVE, "#")
    assert ControlSignal.decode("!") == (ControlSignal.NEW_DATA, "!")
    assert ControlSignal.decode("R") == (ControlSignal.RESET, "R")
    assert ControlSignal.decode("E") == (ControlSignal.REAUTHENTICATE, "E")
    assert ControlSignal.decode(b"!") == (ControlSignal.NEW_DATA, "!")
    assert ControlSignal.decode("A") == (ControlSignal.MESSAGE, "A")
    assert ControlSignal.decode("") == (ControlSignal.MESSAGE, "")
    assert ControlSignal.decode("!!") == (ControlSignal.MESSAGE, "!!")


def test_message_from_wire():
    msg = Message.model_validate({"id": 12, "message": "hello", "date": 1700000000, "title": None})
    assert msg.body == "hello"
    assert msg.received_at == 1700000000
    assert msg.dedup_key == ("hello", 1700000000)


def test_highest_id_is_numeric():
    assert highest_id([make_message(9), make_message(10), make_message(2)]) == 10
    assert highest_id([make_message("9"), make_message("10")]) == "10"
    assert highest_id([]) is None


def test_message_id_from_id_str():
    msg = Message.model_validate({"id_str": "4811", "message": "hi", "date": 1700000001})
    assert msg.id == "4811"

    both = Message.model_validate({"id": 4811, "id_str": "4811", "message": "hi", "date": 1700000001})
    assert both.id == 4811


def test_sync_result_is_a_model():
    result = SyncResult(fetched=2, delivered=[5], skipped=[4], acknowledged=5, acknowledge_ok=True)
    assert result.model_dump() == {
        "fetched": 2,
        "delivered": [5],
        "skipped": [4],
        "acknowledged": 5,
        "acknowledge_ok": True,
    }
    assert SyncResult().delivered == []
    assert SyncResult().delivered is not SyncResult().delivered
