import struct
import wave

import numpy as np
import pytest

from wavrider.errors import MalformedContainer, UnsupportedFormat
from wavrider.samples import extract_samples, read_wav


def test_8bit_unsigned_is_centred_on_128():
    raw = bytes([0, 64, 128, 192, 255])
    out = extract_samples(raw, 1, 1)
    assert out.tolist() == [-1.0, -0.5, 0.0, 0.5, 127 / 128]


def test_16bit_signed_little_endian():
    raw = np.array([-32768, -16384, 0, 16384, 32767], dtype="<i2").tobytes()
    out = extract_samples(raw, 2, 1)
    assert out.tolist() == [-1.0, -0.5, 0.0, 0.5, 32767 / 32768]


def test_only_first_channel_is_kept():
    frames = np.array([[100, -100, 7], [200, -200, 7], [-300, 300, 7]], dtype="<i2")
    out = extract_samples(frames.tobytes(), 2, 3)
    np.testing.assert_allclose(out, np.array([100, 200, -300]) / 32768.0)


def test_8bit_stereo_first_channel():
    raw = bytes([0, 255, 255, 0, 128, 0])
    out = extract_samples(raw, 1, 2)
    assert out.tolist() == [-1.0, 127 / 128, 0.0]


def test_trailing_partial_frame_dropped():
    raw = np.array([1, 2, 3], dtype="<i2").tobytes()
    out = extract_samples(raw, 2, 2)
    assert len(out) == 1


def test_samples_stay_in_range():
    raw = bytes(range(256))
    out = extract_samples(raw, 1, 1)
    assert out.min() >= -1.0 and out.max() <= 1.0


@pytest.mark.parametrize("width", [3, 4])
def test_other_widths_rejected(width):
    with pytest.raises(UnsupportedFormat):
        extract_samples(b"\x00" * 24, width, 1)


def test_zero_channels_rejected():
    with pytest.raises(MalformedContainer):
        extract_samples(b"\x00\x00", 2, 0)


def test_read_wav_metadata(tmp_path):
    path = tmp_path / "a.wav"
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(2)
        wf.setsampwidth(2)
        wf.setframerate(22050)
        wf.writeframes(np.array([1000, -5, -1000, -5], dtype="<i2").tobytes())

    stream = read_wav(str(path))
    assert stream.sample_rate == 22050
    assert stream.n_channels == 2
    assert stream.sample_width == 2
    np.testing.assert_allclose(stream.samples, [1000 / 32768.0, -1000 / 32768.0])


def test_read_wav_24bit_is_unsupported(tmp_path):
    path = tmp_path / "a24.wav"
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(3)
        wf.setframerate(8000)
        wf.writeframes(b"\x00" * 30)

    with pytest.raises(UnsupportedFormat):
        read_wav(str(path))


def test_read_wav_not_riff(tmp_path):
    path = tmp_path / "junk.wav"
    path.write_bytes(b"this is not a wav file at all, just some text")
    with pytest.raises(MalformedContainer):
        read_wav(str(path))


def test_read_wav_truncated_header(tmp_path):
    path = tmp_path / "short.wav"
    path.write_bytes(b"RIFF\x10\x00\x00\x00WAVE")
    with pytest.raises(MalformedContainer):
        read_wav(str(path))


KSDATAFORMAT_TAIL = bytes.fromhex("000000001000800000aa00389b71")


def riff_wav(tag, bits, frames, n_channels=1, rate=8000, subformat=None):
    block = n_channels * bits // 8
    fmt = struct.pack("<HHIIHH", tag, n_channels, rate, rate * block, block, bits)
    if subformat is not None:
        fmt += struct.pack("<HHI", 22, bits, 4) + struct.pack("<H", subformat) + KSDATAFORMAT_TAIL
    body = (b"WAVE" + b"fmt " + struct.pack("<I", len(fmt)) + fmt
            + b"data" + struct.pack("<I", len(frames)) + frames)
    return b"RIFF" + struct.pack("<I", len(body)) + body


def test_read_wav_float32_is_unsupported(tmp_path):
    path = tmp_path / "float.wav"
    path.write_bytes(riff_wav(3, 32, np.zeros(16, dtype="<f4").tobytes()))
    with pytest.raises(UnsupportedFormat):
        read_wav(str(path))


def test_read_wav_extensible_16bit(tmp_path):
    path = tmp_path / "ext.wav"
    frames = np.array([16384, -16384, 0, 32767], dtype="<i2").tobytes()
    path.write_bytes(riff_wav(0xFFFE, 16, frames, subformat=1))

    stream = read_wav(str(path))
    assert stream.sample_rate == 8000
    assert stream.n_channels == 1
    assert stream.sample_width == 2
    assert stream.samples.tolist() == [0.5, -0.5, 0.0, 32767 / 32768]


def test_read_wav_extensible_24bit_is_unsupported(tmp_path):
    path = tmp_path / "ext24.wav"
    path.write_bytes(riff_wav(0xFFFE, 24, b"\x00" * 30, subformat=1))
    with pytest.raises(UnsupportedFormat):
        read_wav(str(path))


def test_read_wav_extensible_float_is_unsupported(tmp_path):
    path = tmp_path / "extf.wav"
    path.write_bytes(riff_wav(0xFFFE, 32, np.zeros(8, dtype="<f4").tobytes(), subformat=3))
    with pytest.raises(UnsupportedFormat):
        read_wav(str(path))
