from webaudit.browser_cluster.job import IdAllocator  # type: ignore[import]
from webaudit.core.models import Page, Transition  # type: ignore[import]
from webaudit.engine.dispatcher import BrowserDispatcher  # type: ignore[import]


class RecordingCluster:
    def __init__(self):
        self.submitted = []
        self.finished = False
        self.stopped = False
        self.sitemap = {}

    def queue(self, job, callback=None, on_failure=None):
        self.submitted.append((job, callback))

    def done(self):
        return self.finished

    def shutdown(self):
        self.stopped = True


def _dispatcher(cluster, *, has_browser=True, depth=5, pages=None, urls=None):
    return BrowserDispatcher(
        dom_depth_limit=depth,
        cluster_factory=lambda: cluster,
        push_page=lambda page: pages.append(page) is None if pages is not None else True,
        push_url=lambda url: urls.append(url) is None if urls is not None else True,
        has_browser=lambda: has_browser,
        id_allocator=IdAllocator(),
    )


SCRIPTED = "<script>start()</script><a href='/next'>next</a>"


def test_pages_with_script_are_submitted_under_one_id():
    cluster = RecordingCluster()
    dispatcher = _dispatcher(cluster)

    assert dispatcher.consider(Page.from_response("https://app/a", 200, SCRIPTED)) is True
    assert dispatcher.consider(Page.from_response("https://app/b", 200, SCRIPTED)) is True

    jobs = [job for job, _ in cluster.submitted]
    assert len({job.id for job in jobs}) == 1
    assert [job.resource.url for job in jobs] == ["https://app/a", "https://app/b"]


def test_pages_are_skipped_without_script_browser_or_depth():
    cluster = RecordingCluster()
    plain = Page.from_response("https://app/a", 200, "<p>static</p>")
    deep = Page.from_response(
        "https://app/a", 200, SCRIPTED, transitions=[Transition("#x", "click")]
    )

    assert _dispatcher(cluster).consider(plain) is False
    assert _dispatcher(cluster, has_browser=False).consider(Page.from_response("https://app/a", 200, SCRIPTED)) is False
    assert _dispatcher(cluster, depth=1).consider(deep) is False
    assert cluster.submitted == []


def test_wait_for_browser_tracks_cluster_state():
    cluster = RecordingCluster()
    dispatcher = _dispatcher(cluster)

    assert dispatcher.wait_for_browser() is False

    dispatcher.consider(Page.from_response("https://app/a", 200, SCRIPTED))
    assert dispatcher.wait_for_browser() is True

    cluster.finished = True
    assert dispatcher.wait_for_browser() is False

    dispatcher.shutdown()
    assert cluster.stopped is True
    assert dispatcher.cluster is None


def test_browser_pages_feed_both_queues():
    pages, urls = [], []
    dispatcher = _dispatcher(RecordingCluster(), pages=pages, urls=urls)
    page = Page.from_response(
        "https://app/a", 200, SCRIPTED, transitions=[Transition("#menu", "click")]
    )

    assert dispatcher.handle_browser_page(page) is True
    assert pages == [page]
    assert urls == ["https://app/next"]


def test_rejected_browser_pages_do_not_push_paths():
    urls = []
    dispatcher = BrowserDispatcher(
        dom_depth_limit=5,
        cluster_factory=RecordingCluster,
        push_page=lambda page: False,
        push_url=lambda url: urls.append(url) is None,
        has_browser=lambda: True,
        id_allocator=IdAllocator(),
    )

    assert dispatcher.handle_browser_page(Page.from_response("https://app/a", 200, SCRIPTED)) is False
    assert urls == []
