import numpy as np

from wavrider.analyse import analyse_stream, print_report, tone_statistics
from wavrider.intervals import ToneClass
from wavrider.samples import SampleStream
from wavrider.tape_generator import make_tape


def test_statistics_per_class():
    durations = np.array([200e-6, 300e-6, 500e-6, 700e-6, 700e-6, 700e-6])
    stats = tone_statistics(durations)
    assert stats[ToneClass.SHORT]["count"] == 2
    assert stats[ToneClass.MEDIUM]["count"] == 1
    assert stats[ToneClass.LONG]["count"] == 3
    assert abs(stats[ToneClass.SHORT]["mean_us"] - 250.0) < 1e-6
    assert abs(stats[ToneClass.LONG]["mean_us"] - 700.0) < 1e-6


def test_empty_statistics():
    stats = tone_statistics(np.zeros(0))
    assert all(s["count"] == 0 for s in stats.values())


def test_generated_tape_is_mostly_leader(capsys):
    signal = make_tape(b"\x00", leader_sec=0.5)
    stream = SampleStream(samples=signal, sample_rate=44_100, n_channels=1, sample_width=2)
    stats = analyse_stream(stream)
    assert stats[ToneClass.LONG]["count"] > stats[ToneClass.SHORT]["count"]
    assert 620.0 < stats[ToneClass.LONG]["mean_us"] < 680.0

    print_report(stats)
    out = capsys.readouterr().out
    assert "LONG" in out and "SHORT" in out
