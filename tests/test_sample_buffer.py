import pytest

from sample_buffer import SampleBuffer, trimmed_mean


def test_trimmed_mean_drops_one_min_and_one_max():
    assert trimmed_mean([1, 5, 2, 8, 3]) == pytest.approx(10 / 3)


def test_trimmed_mean_only_removes_single_instances():
    assert trimmed_mean([2, 2, 2]) == 2
    assert trimmed_mean([0, 0, 9, 9]) == pytest.approx(4.5)


@pytest.mark.parametrize("values", [[], [4.0], [1.0, 7.0]])
def test_trimmed_mean_needs_three_samples(values):
    assert trimmed_mean(values) == 0.0


def test_buffer_evicts_oldest_first():
    buf = SampleBuffer(3)
    for v in (1, 2, 3, 4):
        buf.push(v)
    assert list(buf) == [2, 3, 4]
    assert len(buf) == 3


def test_buffer_trimmed_mean_and_ready():
    buf = SampleBuffer(6)
    buf.push(0.5)
    buf.push(10.0)
    assert not buf.ready()
    assert buf.trimmed_mean() == 0.0
    buf.push(1.5)
    assert buf.ready()
    assert buf.trimmed_mean() == 1.5


def test_buffer_does_not_reorder_samples():
    buf = SampleBuffer(4)
    for v in (3, 1, 2):
        buf.push(v)
    buf.trimmed_mean()
    assert list(buf) == [3, 1, 2]


def test_buffer_clear():
    buf = SampleBuffer(3)
    buf.push(1)
    buf.clear()
    assert len(buf) == 0


def test_buffer_rejects_tiny_capacity():
    with pytest.raises(ValueError):
        SampleBuffer(2)
