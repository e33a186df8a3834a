from webaudit.engine.trainer import Trainer, element_key  # type: ignore[import]
from webaudit.recon.targeting import ScopeFilter  # type: ignore[import]

from tests.helpers.webaudit_imports import Page

TARGET = "http://app.test"


def make_trainer(pushed, *, limit_reached=False):
    return Trainer(
        ScopeFilter.for_target(TARGET),
        lambda page: pushed.append(page) is None,
        page_limit_reached=lambda: limit_reached,
    )


def response(url, links):
    body = "".join(f"<a href='{link}'>x</a>" for link in links)
    return Page.from_response(url, 200, body)


def test_element_key_ignores_parameter_values():
    assert element_key(f"{TARGET}/s?q=1&page=2") == element_key(f"{TARGET}/s?page=9&q=<script>")
    assert element_key(f"{TARGET}/s?q=1") != element_key(f"{TARGET}/s?id=1")


def test_response_with_unseen_link_is_pushed_once():
    pushed = []
    trainer = make_trainer(pushed)
    trainer.learn(response(f"{TARGET}/a", ["/a", "/b"]))

    assert trainer.train(response(f"{TARGET}/a?q=1", ["/a", "/b"])) is False
    assert trainer.train(response(f"{TARGET}/a?q=2", ["/b", "/hidden"])) is True
    assert trainer.train(response(f"{TARGET}/a?q=3", ["/b", "/hidden"])) is False
    assert [page.dom.url for page in pushed] == [f"{TARGET}/a?q=2"]


def test_out_of_scope_or_empty_responses_are_ignored():
    pushed = []
    trainer = make_trainer(pushed)

    assert trainer.train(response(f"{TARGET}/a", ["http://elsewhere.test/x"])) is False
    assert trainer.train(Page.empty(f"{TARGET}/down")) is False
    assert trainer.train(response("http://elsewhere.test/a", ["/new"])) is False
    assert pushed == []


def test_nothing_is_pushed_once_the_page_limit_is_reached():
    pushed = []
    trainer = make_trainer(pushed, limit_reached=True)

    assert trainer.train(response(f"{TARGET}/a", ["/new"])) is False
    assert pushed == []
