from webaudit.core.uri import to_absolute  # type: ignore[import]

from tests.helpers.webaudit_imports import Page, Transition


def test_to_absolute_keeps_router_fragments_only():
    assert to_absolute("https://app/a/b", "#/login") == "https://app/#/login"
    assert to_absolute("https://app/a/b", "/c#top") == "https://app/c"
    assert to_absolute("https://app/a/b", "d") == "https://app/a/d"


def test_to_absolute_ignores_non_http_links():
    for href in ["javascript:void(0)", "mailto:a@b", "tel:123", "", None]:
        assert to_absolute("https://app", href) is None


def test_from_response_extracts_paths_and_script_presence():
    body = """
    <a href="/one">1</a>
    <a href="/one#section">1 again</a>
    <form action="/search"></form>
    <iframe src="https://app/frame"></iframe>
    <button onclick="go()">go</button>
    """

    page = Page.from_response("https://app/", 200, body)

    assert page.paths == ["https://app/one", "https://app/search", "https://app/frame"]
    assert page.has_script is True
    assert page.dom.url == "https://app/"
    assert page.dom.depth == 0


def test_static_page_has_no_script():
    page = Page.from_response("https://app/", 200, "<p>hello</p>")

    assert page.has_script is False
    assert page.paths == []


def test_fingerprint_depends_on_dom_state():
    click = Transition("#menu", "click")
    base = Page.from_response("https://app/", 200, "<p>x</p>")
    same = Page.from_response("https://app/", 200, "<p>x</p>")
    clicked = Page.from_response("https://app/", 200, "<p>x</p>", transitions=[click])

    assert base.fingerprint == same.fingerprint
    assert base.fingerprint != clicked.fingerprint
    assert str(click) == "'click' on: #menu"


def test_empty_page_means_no_response():
    page = Page.empty("https://app/down")

    assert page.code == 0
    assert page.dom.url == "https://app/down"
    assert page.dom.root_url == "https://app/down"


def test_dom_root_url_survives_transitions_that_change_the_url():
    click = Transition('a[href^="#/"]', "click")
    page = Page.from_response(
        "https://app/#/c", 200, "<p>c</p>", transitions=[click], root_url="https://app/a"
    )

    assert page.dom.url == "https://app/#/c"
    assert page.dom.root_url == "https://app/a"
    assert page.dom.depth == 1
