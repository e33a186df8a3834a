from tests.helpers.webaudit_imports import dependencies


def test_verify_dependencies_reports_browser(monkeypatch):
    monkeypatch.setattr(dependencies, "check_browser", lambda: True)

    assert dependencies.verify_dependencies() == {"chromium (playwright)": True}


def test_check_browser_false_when_playwright_fails(monkeypatch):
    class Broken:
        def __enter__(self):
            raise dependencies.PlaywrightError("driver missing")

        def __exit__(self, *exc_info):
            return False

    monkeypatch.setattr(dependencies, "sync_playwright", lambda: Broken())

    assert dependencies.check_browser() is False
