from webaudit.auth.session import Session  # type: ignore[import]

from tests.helpers.fakes import FakeHttp
from tests.helpers.webaudit_imports import ScannerConfig

TARGET = "http://app.test"
CHECK_URL = f"{TARGET}/profile"


def make_config(**overrides):
    options = dict(
        target_url=TARGET,
        login_check_url=CHECK_URL,
        login_check_pattern="Logout",
        auth_email="user@example.com",
        auth_password="secret",
    )
    options.update(overrides)
    return ScannerConfig(**options)


def test_session_cookie_is_applied_to_target_host():
    http = FakeHttp()
    session = Session(make_config(session_cookie="sid=abc"), http)

    assert session.apply_session_cookie() is True
    assert http.cookies == [{"name": "sid", "value": "abc", "domain": "app.test", "path": "/"}]


def test_malformed_session_cookie_is_ignored():
    http = FakeHttp()

    assert Session(make_config(session_cookie="garbage"), http).apply_session_cookie() is False
    assert http.cookies == []


def test_without_login_check_the_session_is_trusted():
    session = Session(make_config(login_check_url=None), FakeHttp())

    assert session.logged_in() is True


def test_lost_session_triggers_login_with_filtered_cookies():
    http = FakeHttp({CHECK_URL: "<a>Sign in</a>"})
    calls = []

    def login(url, email, password):
        calls.append((url, email, password))
        http.bodies[CHECK_URL] = "<a>Logout</a>"
        return [
            {"name": "token", "value": "t1", "domain": "app.test"},
            {"name": "ads", "value": "x", "domain": "ads.example"},
        ]

    session = Session(make_config(), http, login=login)

    assert session.ensure_logged_in() is True
    assert calls == [(f"{TARGET}/#/login", "user@example.com", "secret")]
    assert [cookie["name"] for cookie in http.cookies] == ["token"]


def test_lost_session_without_credentials_cannot_recover():
    http = FakeHttp({CHECK_URL: "<a>Sign in</a>"})
    session = Session(make_config(auth_password=None), http, login=lambda *args: [])

    assert session.ensure_logged_in() is False
