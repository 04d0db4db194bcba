import re

import pytest

from okfees import mail
from okfees.services.password_recovery_service import (PasswordRecoveryFlow, PasswordRecoveryService,
                                                       RecoveryStep)
from okfees.utils.password_validator import PasswordValidator


class FakeRecoveryService:
    def __init__(self, request_ok=True, verify_ok=True, update_ok=True):
        self.request_ok = request_ok
        self.verify_ok = verify_ok
        self.update_ok = update_ok
        self.calls = []

    def request_code(self, email):
        self.calls.append(("request", email))
        return self.request_ok, "sent" if self.request_ok else "mail failed"

    def verify_code(self, email, code):
        self.calls.append(("verify", email, code))
        return self.verify_ok, "ok" if self.verify_ok else "bad code"

    def update_password(self, email, code, password):
        self.calls.append(("update", email, code, password))
        return self.update_ok, "updated" if self.update_ok else "update failed"


def _awaiting_code(service):
    flow = PasswordRecoveryFlow(service=service)
    assert flow.submit_email("owner@example.com") == (True, "sent")
    service.calls.clear()
    return flow


def _code_from(message):
    return re.search(r"Verification code: (\d+)", message.body).group(1)


def test_validator_rules():
    validator = PasswordValidator(6)
    assert validator.validate_password("secret1", "secret1") == (True, [])
    assert validator.validate_password("", "")[1] == ["Password is required"]
    assert validator.validate_password("abc", "abc")[1] == ["Password must be at least 6 characters"]
    assert "Passwords do not match" in validator.validate_password("secret1", "secret2")[1]


def test_empty_email_is_rejected_locally():
    service = FakeRecoveryService()
    flow = PasswordRecoveryFlow(service=service)
    ok, message = flow.submit_email("  ")
    assert not ok
    assert service.calls == []
    assert flow.step == RecoveryStep.AWAITING_EMAIL


def test_failed_request_stays_on_email_step():
    flow = PasswordRecoveryFlow(service=FakeRecoveryService(request_ok=False))
    assert flow.submit_email("owner@example.com") == (False, "mail failed")
    assert flow.step == RecoveryStep.AWAITING_EMAIL


def test_mismatched_confirmation_never_calls_service():
    service = FakeRecoveryService()
    flow = _awaiting_code(service)
    ok, message = flow.submit_code("123456", "secret123", "secret124")
    assert (ok, message) == (False, "Passwords do not match")
    assert service.calls == []
    assert flow.step == RecoveryStep.AWAITING_CODE


@pytest.mark.parametrize("code,password", [("", "secret123"), ("123456", "abc"), ("123456", "")])
def test_invalid_input_never_calls_service(code, password):
    service = FakeRecoveryService()
    flow = _awaiting_code(service)
    ok, _ = flow.submit_code(code, password, password)
    assert not ok
    assert service.calls == []


def test_update_failure_after_verification_is_reported():
    service = FakeRecoveryService(update_ok=False)
    flow = _awaiting_code(service)
    assert flow.submit_code("123456", "secret123", "secret123") == (False, "update failed")
    assert [call[0] for call in service.calls] == ["verify", "update"]
    assert flow.step == RecoveryStep.AWAITING_CODE


def test_done_only_after_verify_and_update():
    service = FakeRecoveryService()
    flow = _awaiting_code(service)
    assert flow.submit_code("123456", "secret123", "secret123") == (True, "updated")
    assert flow.step == RecoveryStep.DONE


def test_restart_discards_email():
    flow = _awaiting_code(FakeRecoveryService())
    flow.restart()
    assert flow.step == RecoveryStep.AWAITING_EMAIL
    assert flow.email is None
    assert PasswordRecoveryFlow.from_dict({"step": "bogus"}).step == RecoveryStep.AWAITING_EMAIL


def test_service_codes_are_single_use_and_superseded(app_ctx, make_user):
    make_user()
    with mail.record_messages() as outbox:
        assert PasswordRecoveryService.request_code("owner@example.com")[0]
        assert PasswordRecoveryService.request_code("owner@example.com")[0]
    first, second = _code_from(outbox[0]), _code_from(outbox[1])

    if first != second:
        assert PasswordRecoveryService.verify_code("owner@example.com", first)[0] is False
    assert PasswordRecoveryService.verify_code("owner@example.com", second)[0] is True
    assert PasswordRecoveryService.update_password("owner@example.com", second, "newpass1")[0] is True
    assert PasswordRecoveryService.update_password("owner@example.com", second, "newpass2")[0] is False


def test_recovery_over_http(app, client, make_user, login):
    make_user()
    with mail.record_messages() as outbox:
        response = client.post("/password-recovery/request", json={"email": "owner@example.com"})
    assert response.status_code == 200
    assert response.get_json()["step"] == "awaiting_code"
    assert len(outbox) == 1
    assert outbox[0].recipients == ["owner@example.com"]
    code = _code_from(outbox[0])
    assert len(code) == app.config["RECOVERY_CODE_LENGTH"]

    mismatch = client.post("/password-recovery/verify",
                           json={"code": code, "new_password": "brandnew1", "confirm_password": "brandnew2"})
    assert mismatch.status_code == 400
    wrong = client.post("/password-recovery/verify",
                        json={"code": "000000" if code != "000000" else "111111",
                              "new_password": "brandnew1", "confirm_password": "brandnew1"})
    assert wrong.status_code == 400
    assert client.get("/password-recovery/state").get_json()["step"] == "awaiting_code"

    done = client.post("/password-recovery/verify",
                       json={"code": code, "new_password": "brandnew1", "confirm_password": "brandnew1"})
    assert done.status_code == 200
    body = done.get_json()
    assert body["step"] == "done"
    assert body["redirect"].endswith("/auth/login")

    login("owner@example.com", "brandnew1")


def test_unknown_email_does_not_send(client):
    with mail.record_messages() as outbox:
        response = client.post("/password-recovery/request", json={"email": "ghost@example.com"})
    assert response.status_code == 200
    assert outbox == []


def test_request_validation_and_restart(client, make_user):
    make_user()
    assert client.post("/password-recovery/request", json={"email": ""}).status_code == 400
    client.post("/password-recovery/request", json={"email": "owner@example.com"})
    body = client.post("/password-recovery/restart").get_json()
    assert body["step"] == "awaiting_email"
    assert body["email"] is None
