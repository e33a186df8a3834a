import threading

from webaudit.engine.pause import PauseController  # type: ignore[import]


def test_paused_while_any_holder_remains():
    controller = PauseController()

    first = controller.pause("ui")
    second = controller.pause("ui")

    assert controller.resume(first) is True
    assert controller.paused is True
    assert controller.resume(second) is True
    assert controller.paused is False


def test_releasing_a_token_twice_is_a_noop():
    controller = PauseController()
    token = controller.pause()
    other = controller.pause()

    controller.resume(token)

    assert controller.resume(token) is False
    assert controller.paused is True
    controller.resume(other)


def test_resume_without_token_releases_the_latest_hold():
    controller = PauseController()
    controller.pause("a")
    controller.pause("b")

    assert controller.resume() is True
    assert controller.paused is True
    assert controller.resume() is True
    assert controller.resume() is False


def test_wait_if_paused_blocks_until_resume():
    controller = PauseController()
    token = controller.pause()

    assert controller.wait_if_paused(timeout=0.01) is False

    threading.Timer(0.05, controller.resume, args=(token,)).start()
    assert controller.wait_if_paused(timeout=5) is True
