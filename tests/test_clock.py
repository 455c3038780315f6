import pytest

from vrm_face_puppet.core import AnimationClock


def test_first_delta_starts_clock():
    times = iter([10.0, 10.5, 11.25])
    clock = AnimationClock(time_fn=lambda: next(times))

    assert not clock.running
    assert clock.get_delta() == 0.0
    assert clock.running
    assert clock.elapsed_time == 0.0

    assert clock.get_delta() == pytest.approx(0.5)
    assert clock.get_delta() == pytest.approx(0.75)
    assert clock.elapsed_time == pytest.approx(1.25)


def test_default_time_source_is_monotonic():
    clock = AnimationClock()
    clock.get_delta()
    assert clock.get_delta() >= 0.0
