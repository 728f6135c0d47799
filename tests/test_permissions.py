import logging

from shot_tracker.permissions import CameraPermission


def test_grant_notifies_listeners():
    permission = CameraPermission(lambda: True)
    results = []
    permission.subscribe(results.append)

    assert permission.request() is True
    assert permission.granted
    assert results == [True]


def test_denial_can_be_retried():
    answers = [False, True]
    permission = CameraPermission(lambda: answers.pop(0))
    results = []
    permission.subscribe(results.append)

    assert permission.request() is False
    assert not permission.granted
    assert permission.request() is True
    assert results == [False, True]


def test_requester_error_counts_as_denial(caplog):
    def broken():
        raise RuntimeError("dialog failed")

    permission = CameraPermission(broken)
    with caplog.at_level(logging.WARNING):
        assert permission.request() is False
    assert "Camera permission request failed" in caplog.text
    assert "Camera permission denied" in caplog.text
