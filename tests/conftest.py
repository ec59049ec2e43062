import pytest

from wavrider.intervals import ToneClass

S, M, L = ToneClass.SHORT, ToneClass.MEDIUM, ToneClass.LONG


def bits_to_tones(bits):
    """'1' -> MEDIUM,MEDIUM and '0' -> SHORT,SHORT."""
    tones = []
    for b in bits:
        tones.extend((M, M) if b == "1" else (S, S))
    return tones


def byte_to_tones(value):
    return bits_to_tones(format(value, "08b"))


def record_tones(data, leader=60, trailer=4):
    tones = [M] * leader + [S, S]
    for value in data:
        tones.extend(byte_to_tones(value))
    return tones + [L] * trailer


@pytest.fixture
def tape_wav(tmp_path):
    """Write a generated tape to disk and return its path."""
    from wavrider.tape_generator import make_tape, write_wav

    def _make(blocks, sample_rate=44_100, sample_width=2, n_channels=1, **kw):
        path = tmp_path / f"tape_{sample_rate}_{sample_width}_{n_channels}.wav"
        signal = make_tape(blocks, sample_rate=sample_rate, **kw)
        write_wav(str(path), signal, sample_rate, sample_width, n_channels)
        return str(path)

    return _make
