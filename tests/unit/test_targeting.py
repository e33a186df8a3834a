from webaudit.recon.targeting import ScopeFilter  # type: ignore[import]

from tests.helpers.webaudit_imports import Page


def test_only_target_host_is_allowed():
    scope = ScopeFilter.for_target("http://app.test:3000")

    assert scope.is_allowed("http://app.test:3000/a") is True
    assert scope.is_allowed("http://other.test/a") is False
    assert scope.is_allowed("ftp://app.test:3000/a") is False
    assert scope.is_allowed("/relative") is True


def test_excluded_keywords_block_hosts():
    scope = ScopeFilter.for_target("https://github.com")

    assert scope.is_allowed("https://github.com/repo") is False


def test_path_and_page_exclusion_patterns():
    scope = ScopeFilter.for_target(
        "http://app.test",
        exclude_path_patterns=["logout"],
        exclude_page_patterns=["maintenance mode"],
    )

    assert scope.skip_path("http://app.test/LOGOUT") is True
    assert scope.skip_path("http://app.test/profile") is False
    assert scope.skip_page(Page.from_response("http://app.test/", 200, "<p>Maintenance Mode</p>")) is True
    assert scope.skip_page(Page.from_response("http://app.test/", 200, "<p>ok</p>")) is False


def test_filter_cookies_keeps_target_domains():
    scope = ScopeFilter.for_target("http://app.test")
    cookies = [
        {"name": "a", "domain": "app.test"},
        {"name": "b", "domain": ".cdn.app.test"},
        {"name": "c", "domain": "tracker.example"},
        {"name": "d"},
    ]

    assert [cookie["name"] for cookie in scope.filter_cookies(cookies)] == ["a", "b"]
