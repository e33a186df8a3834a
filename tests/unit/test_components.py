from types import SimpleNamespace

import pytest

from webaudit.core.errors import ComponentNotFoundError  # type: ignore[import]
from webaudit.plugins import Healthmap, PluginManager  # type: ignore[import]
from webaudit.plugins.base import Plugin  # type: ignore[import]
from webaudit.reports.manager import ReportManager  # type: ignore[import]

from tests.helpers.webaudit_imports import Issue


class FakeFramework:
    def __init__(self, sitemap, issues):
        self.sitemap = sitemap
        self.checks = SimpleNamespace(results=lambda: issues)

    def wait_until_stopped(self, timeout=None):
        return True


class Crashing(Plugin):
    name = "crashing"

    def run(self):
        raise RuntimeError("plugin failed")


def test_manager_loads_everything_with_wildcard():
    manager = ReportManager()

    assert manager.load(["*"]) == manager.available()
    assert "json" in manager


def test_manager_reports_unknown_components():
    manager = ReportManager()

    with pytest.raises(ComponentNotFoundError, match="Report 'xml' could not be found."):
        manager["xml"]
    with pytest.raises(ComponentNotFoundError):
        manager.name_to_path("xml")


def test_info_describes_component():
    details = ReportManager().info("json")

    assert details["name"] == "json"
    assert details["author"] == ["webaudit"]
    assert details["description"]


def test_healthmap_splits_sitemap_by_issues():
    framework = FakeFramework(
        {"https://app/a": 200, "https://app/b": 200},
        [Issue(check="sql_errors", name="SQL Injection", url="https://app/a?id=1")],
    )
    manager = PluginManager(framework)
    manager.load(["healthmap"])

    manager.run()
    manager.block(timeout=5)

    result = manager.results()["healthmap"]
    assert result["with_issues"] == 1
    assert result["without_issues"] == 1
    assert result["issue_percentage"] == 50.0


def test_plugin_failures_are_contained():
    manager = PluginManager(FakeFramework({}, []), builtins={"crashing": Crashing, "healthmap": Healthmap})
    manager.load(["*"])

    manager.run()
    manager.block(timeout=5)

    assert manager.busy() is False
    assert set(manager.results()) == {"healthmap"}
