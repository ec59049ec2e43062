import numpy as np
import pytest

from wavrider.config import DecoderConfig
from wavrider.decoder import decode_file, decode_samples
from wavrider.errors import MalformedContainer
from wavrider.samples import SampleStream
from wavrider.tape_generator import make_tape

PAYLOAD = bytes(range(256)) + b"HELLO APPLE ][\r"


@pytest.mark.parametrize("sample_rate", [22_050, 44_100, 48_000])
@pytest.mark.parametrize("sample_width", [1, 2])
def test_generated_tape_round_trips(tape_wav, sample_rate, sample_width):
    path = tape_wav(PAYLOAD, sample_rate=sample_rate, sample_width=sample_width,
                    leader_sec=0.2)
    result = decode_file(path, verbose=False)

    assert result.data == PAYLOAD
    assert result.blocks == [PAYLOAD]
    assert result.sample_rate == sample_rate


def test_stereo_decodes_first_channel_only(tape_wav):
    # Channel 1 is silent, so reading it would give no crossings at all
    path = tape_wav(b"\x12\x34", n_channels=2, leader_sec=0.1)
    result = decode_file(path, verbose=False)
    assert result.data == b"\x12\x34"
    assert result.n_crossings > 0


def test_header_and_body_records(tape_wav):
    path = tape_wav([b"\x00\x08\x10", b"10 PRINT"], leader_sec=0.1)
    result = decode_file(path, verbose=False)
    assert result.blocks == [b"\x00\x08\x10", b"10 PRINT"]
    assert result.data == b"\x00\x08\x1010 PRINT"


def test_noisy_tape_still_decodes(tape_wav):
    path = tape_wav(b"NOISE", leader_sec=0.2, snr_db=30.0, bandwidth_hz=8000)
    assert decode_file(path, verbose=False).data == b"NOISE"


def test_leader_too_short_gives_no_data(tape_wav):
    path = tape_wav(b"\xAA", leader_sec=0.02)
    assert decode_file(path, verbose=False).data == b""


def test_silence_is_not_an_error():
    stream = SampleStream(samples=np.zeros(44_100), sample_rate=44_100,
                          n_channels=1, sample_width=2)
    result = decode_samples(stream)
    assert result.data == b""
    assert result.n_crossings == 0


def test_decode_is_idempotent():
    signal = make_tape(b"SAME TWICE", leader_sec=0.1)
    stream = SampleStream(samples=signal, sample_rate=44_100, n_channels=1, sample_width=2)
    first = decode_samples(stream)
    second = decode_samples(stream)
    assert first.data == second.data == b"SAME TWICE"
    assert [str(e) for e in first.events] == [str(e) for e in second.events]


def test_thresholds_follow_config():
    # With the MEDIUM band pushed above 500 us the 1 kHz "1" bits read as SHORT
    signal = make_tape(b"\xff", leader_sec=0.1)
    stream = SampleStream(samples=signal, sample_rate=44_100, n_channels=1, sample_width=2)
    config = DecoderConfig(short_threshold_us=560, long_threshold_us=600)
    assert decode_samples(stream, config).data == b"\x00"


def test_verbose_output(tape_wav, capsys):
    path = tape_wav(b"OK", leader_sec=0.1)
    decode_file(path, verbose=True, show_events=True)
    out = capsys.readouterr().out
    assert "Read " in out
    assert "zero crossings" in out
    assert "[SYNC block 0" in out
    assert "4F" in out and "4B" in out


def test_missing_data_chunk(tmp_path):
    path = tmp_path / "nodata.wav"
    fmt = (b"fmt " + (16).to_bytes(4, "little") + (1).to_bytes(2, "little")
           + (1).to_bytes(2, "little") + (8000).to_bytes(4, "little")
           + (16000).to_bytes(4, "little") + (2).to_bytes(2, "little")
           + (16).to_bytes(2, "little"))
    body = b"WAVE" + fmt
    path.write_bytes(b"RIFF" + len(body).to_bytes(4, "little") + body)
    with pytest.raises(MalformedContainer):
        decode_file(str(path), verbose=False)
