"""Decode FSK cassette audio (Apple II monitor format) from WAV recordings."""

from wavrider.config import DecoderConfig, load_config
from wavrider.crossings import find_zero_crossings
from wavrider.decoder import DecodeResult, decode_file, decode_samples
from wavrider.demodulator import Event, EventKind, FskDemodulator, State, demodulate
from wavrider.errors import ConfigError, MalformedContainer, UnsupportedFormat, WavriderError
from wavrider.intervals import ToneClass, classify_crossings, classify_duration, half_cycle_durations
from wavrider.samples import SampleStream, extract_samples, read_wav

__version__ = "0.1.0"
