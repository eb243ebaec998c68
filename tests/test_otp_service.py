"""
OTP generation and checking.
"""
from datetime import datetime, timedelta

from vendorhub.services import otp_service

NOW = datetime(2024, 5, 1, 12, 0, 0)


def test_generated_code_is_six_digits():
    for _ in range(50):
        otp = otp_service.generate_otp()
        assert len(otp) == 6
        assert otp.isdigit()
        assert otp[0] != "0"


def test_custom_length():
    assert len(otp_service.generate_otp(4)) == 4


def test_expiry_is_in_the_future():
    assert otp_service.otp_expiry(NOW) == NOW + timedelta(minutes=10)


def test_correct_code_accepted():
    user = {"otp": "123456", "otp_expire": NOW + timedelta(minutes=5)}
    check = otp_service.check_otp(user, "123456", NOW)
    assert check.success
    assert check.message == "OTP verified successfully"


def test_wrong_code_rejected():
    user = {"otp": "123456", "otp_expire": NOW + timedelta(minutes=5)}
    check = otp_service.check_otp(user, "654321", NOW)
    assert not check.success
    assert check.message == "OTP is incorrect"


def test_expiry_checked_before_code():
    user = {"otp": "123456", "otp_expire": NOW - timedelta(seconds=1)}
    check = otp_service.check_otp(user, "000000", NOW)
    assert check.message == "OTP has expired"


def test_missing_otp_counts_as_expired():
    check = otp_service.check_otp({}, "123456", NOW)
    assert not check.success
    assert check.message == "OTP has expired"


async def test_send_otp_logs_code(caplog):
    with caplog.at_level("INFO", logger="vendorhub.services.otp_service"):
        assert await otp_service.send_otp("9876543210", "123456")
    assert "123456" in caplog.text
