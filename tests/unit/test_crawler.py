import threading

from webaudit.core.config import ScannerConfig  # type: ignore[import]
from webaudit.engine.pause import PauseController  # type: ignore[import]
from webaudit.recon.crawler import Spider  # type: ignore[import]

from tests.helpers.fakes import FakeHttp

ROOT = "http://app.test"
SITE = {
    ROOT: "<a href='/a'>a</a><a href='/b'>b</a><a href='https://elsewhere.test/x'>x</a>",
    f"{ROOT}/a": "<a href='/b'>b</a><a href='/missing'>missing</a>",
    f"{ROOT}/b": "<p>leaf</p>",
}


def _spider(**overrides) -> Spider:
    config = ScannerConfig(target_url=ROOT, **overrides)
    return Spider(config, FakeHttp(SITE))


def test_spider_visits_each_in_scope_page_once():
    discovered = []

    state = _spider().run(lambda page: discovered.append(page.url))

    assert discovered == [ROOT, f"{ROOT}/a", f"{ROOT}/b"]
    assert state.visited_count == 3
    assert state.failed_urls == {f"{ROOT}/missing"}


def test_spider_respects_page_limit():
    discovered = []

    _spider(page_limit=2).run(lambda page: discovered.append(page.url))

    assert len(discovered) == 2


def test_spider_honours_exclusions():
    discovered = []

    _spider(exclude_path_patterns=["/b$"]).run(lambda page: discovered.append(page.url))

    assert f"{ROOT}/b" not in discovered


def test_spider_waits_while_paused():
    controller = PauseController()
    spider = Spider(ScannerConfig(target_url=ROOT), FakeHttp(SITE), pause_controller=controller)
    token = controller.pause()
    discovered = []

    threading.Timer(0.05, controller.resume, args=(token,)).start()
    spider.run(lambda page: discovered.append(page.url))

    assert discovered[0] == ROOT
    assert controller.paused is False
