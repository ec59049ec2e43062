"""
FskDemodulator
==============
Half-cycle by half-cycle FSK cassette demodulator.

Interface
---------
    dem = FskDemodulator(DecoderConfig())

    # Feed one classified half-cycle at a time
    events = dem.feed(ToneClass.MEDIUM)     # returns list of Event objects

    dem.data        # every byte decoded so far
    dem.blocks      # the same bytes split at each sync

Event types
-----------
    Event.SYNC         payload = block number (0-based)
    Event.BYTE         payload = decoded byte value
    Event.BIT_ERROR    payload = (first, second) mismatched half-cycle pair
    Event.END_OF_DATA  payload = number of bits discarded from the partial byte

State machine
-------------
    FIND_HEADER → FIND_SYNC → READ_DATA
         ↑           |            |
         └───────────┴────────────┘  (no sync / leader tone after data)

    FIND_HEADER: count MEDIUM/LONG half-cycles of leader tone. A SHORT after
                 more than min_header_count of them may be the first half of
                 the sync bit; anything else resets the count.
    FIND_SYNC:   lookahead for the second SHORT of the sync bit. If it is not
                 there the half-cycle goes back through FIND_HEADER as if it
                 had never been peeked.
    READ_DATA:   half-cycles in pairs. SHORT+SHORT = 0, MEDIUM+MEDIUM = 1,
                 bits MSB first. A LONG in either half is leader tone again and
                 ends the block; other mismatches are dropped.

Running out of input in any state just stops. A half-read pair or partial
byte is never emitted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Optional

from wavrider.config import DecoderConfig
from wavrider.intervals import ToneClass


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

class EventKind(Enum):
    SYNC        = auto()
    BYTE        = auto()
    BIT_ERROR   = auto()
    END_OF_DATA = auto()


@dataclass
class Event:
    kind: EventKind
    payload: object = None
    index: int = 0          # half-cycle number that produced the event

    def __str__(self):
        if self.kind == EventKind.SYNC:
            return f"[SYNC block {self.payload} @ {self.index}]"
        if self.kind == EventKind.BYTE:
            return f"{self.payload:02X}"
        if self.kind == EventKind.BIT_ERROR:
            a, b = self.payload
            return f"[BIT ERROR {a.name}/{b.name} @ {self.index}]"
        if self.kind == EventKind.END_OF_DATA:
            return f"[END OF DATA @ {self.index}, {self.payload} bits dropped]"
        return ""


class State(Enum):
    FIND_HEADER = auto()
    FIND_SYNC   = auto()
    READ_DATA   = auto()


# ---------------------------------------------------------------------------
# Demodulator
# ---------------------------------------------------------------------------

class FskDemodulator:

    def __init__(self, config: Optional[DecoderConfig] = None):
        self.config = config or DecoderConfig()

        self._state: State = State.FIND_HEADER
        self._header_count: int = 0
        self._n_fed: int = 0

        # First half of the bit pair in progress (READ_DATA only)
        self._first_half: Optional[ToneClass] = None

        # Bit accumulator
        self._current_byte: int = 0
        self._bit_count:    int = 0

        self._data = bytearray()
        self._blocks: List[bytearray] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def feed(self, tone: ToneClass) -> List[Event]:
        """Consume one classified half-cycle. Returns a (possibly empty) event list."""
        index = self._n_fed
        self._n_fed += 1

        if self._state == State.FIND_HEADER:
            return self._find_header(tone, index)
        if self._state == State.FIND_SYNC:
            return self._find_sync(tone, index)
        return self._read_data(tone, index)

    def feed_all(self, tones: Iterable[ToneClass]) -> List[Event]:
        events: List[Event] = []
        for tone in tones:
            events.extend(self.feed(tone))
        return events

    @property
    def state(self) -> State:
        return self._state

    @property
    def header_count(self) -> int:
        return self._header_count

    @property
    def bit_count(self) -> int:
        return self._bit_count

    @property
    def data(self) -> bytes:
        return bytes(self._data)

    @property
    def blocks(self) -> List[bytes]:
        """Bytes grouped by the sync that started them. Empty blocks are left out."""
        return [bytes(b) for b in self._blocks if b]

    # ------------------------------------------------------------------
    # Internal: states
    # ------------------------------------------------------------------

    def _find_header(self, tone: ToneClass, index: int) -> List[Event]:
        if tone != ToneClass.SHORT:
            self._header_count += 1
        elif self._header_count > self.config.min_header_count:
            # Possible first half of the sync bit; peek at the next one
            self._state = State.FIND_SYNC
        else:
            self._header_count = 0
        return []

    def _find_sync(self, tone: ToneClass, index: int) -> List[Event]:
        if tone == ToneClass.SHORT:
            self._state = State.READ_DATA
            self._first_half = None
            self._reset_accumulator()
            self._blocks.append(bytearray())
            return [Event(EventKind.SYNC, len(self._blocks) - 1, index)]

        # False alarm. The peeked half-cycle was not consumed.
        self._state = State.FIND_HEADER
        self._header_count = 0
        return self._find_header(tone, index)

    def _read_data(self, tone: ToneClass, index: int) -> List[Event]:
        if self._first_half is None:
            self._first_half = tone
            return []

        first, second = self._first_half, tone
        self._first_half = None

        if first == ToneClass.SHORT and second == ToneClass.SHORT:
            return self._push_bit(0, index)
        if first == ToneClass.MEDIUM and second == ToneClass.MEDIUM:
            return self._push_bit(1, index)

        if first == ToneClass.LONG or second == ToneClass.LONG:
            dropped = self._bit_count
            self._reset_accumulator()
            self._state = State.FIND_HEADER
            self._header_count = 0
            return [Event(EventKind.END_OF_DATA, dropped, index)]

        # SHORT/MEDIUM mismatch: drop the pair, keep the accumulator where it is
        return [Event(EventKind.BIT_ERROR, (first, second), index)]

    # ------------------------------------------------------------------
    # Internal: bit accumulator
    # ------------------------------------------------------------------

    def _push_bit(self, bit: int, index: int) -> List[Event]:
        self._current_byte = ((self._current_byte << 1) | bit) & 0xFF
        self._bit_count += 1
        if self._bit_count < 8:
            return []

        value = self._current_byte
        self._data.append(value)
        self._blocks[-1].append(value)
        self._reset_accumulator()
        return [Event(EventKind.BYTE, value, index)]

    def _reset_accumulator(self):
        self._current_byte = 0
        self._bit_count    = 0


def demodulate(tones: Iterable[ToneClass], config: Optional[DecoderConfig] = None) -> bytes:
    """Run a fresh demodulator over a whole half-cycle sequence."""
    dem = FskDemodulator(config)
    dem.feed_all(tones)
    return dem.data
