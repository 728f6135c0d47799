from shot_tracker.overlay import ShotCounterOverlay
from shot_tracker.shot_counter import ShotStats


def test_overlay_starts_empty(qapp):
    overlay = ShotCounterOverlay()
    assert overlay.shots_column.value() == "0"
    assert overlay.makes_column.value() == "0"
    assert overlay.pct_column.value() == "0%"
    assert overlay.pct_column.caption_label.text() == "Percentage"


def test_overlay_shows_stats(qapp):
    overlay = ShotCounterOverlay()
    overlay.set_stats(ShotStats(shots=5, makes=2))
    assert overlay.shots_column.value() == "5"
    assert overlay.makes_column.value() == "2"
    assert overlay.pct_column.value() == "40%"
