# midi_macro/tempo.py
from bisect import bisect_right

from midi_macro.song import TempoMessage

DEFAULT_TEMPO = 500000  # microseconds per quarter note, 120 BPM

TEMPO_MODES = ("flat", "segmented")


def tempo_to_bpm(microseconds_per_quarter):
    return 60_000_000 / microseconds_per_quarter


class TempoMap:
    """
    Tick position -> microseconds per quarter note.

    There is always an entry at tick 0. Read-only once built.
    """

    def __init__(self, entries=None):
        tempos = {0: DEFAULT_TEMPO}
        if entries:
            tempos.update(entries)
        self._ticks = sorted(tempos)
        self._tempos = [tempos[t] for t in self._ticks]

    @classmethod
    def from_events(cls, tempo_events):
        """Build from (tick_position, microseconds_per_quarter) pairs; later pairs win."""
        entries = {}
        for tick, tempo in tempo_events:
            entries[tick] = tempo
        return cls(entries)

    def lookup(self, tick: int) -> int:
        """Tempo of the largest entry at or before `tick`."""
        i = bisect_right(self._ticks, tick) - 1
        return self._tempos[max(i, 0)]

    def items(self):
        return list(zip(self._ticks, self._tempos))

    def bpm_at(self, tick: int) -> float:
        return tempo_to_bpm(self.lookup(tick))

    def __repr__(self):
        return f"TempoMap({dict(self.items())!r})"


def build_tempo_map(tracks):
    """
    Collect tempo changes from every track.

    Each track keeps its own tick counter starting at 0, so tempo events
    from different tracks at the same tick overwrite each other.
    """
    tempo_events = []
    for track in tracks:
        track_time = 0
        for delta, message in track:
            track_time += delta
            if isinstance(message, TempoMessage):
                tempo_events.append((track_time, message.microseconds_per_quarter))
    return TempoMap.from_events(tempo_events)


def ticks_to_ms(tick, ticks_per_quarter, tempo_map, speed_multiplier=1.0):
    ms_per_tick = (tempo_map.lookup(tick) / ticks_per_quarter) / 1000.0
    return round(tick * ms_per_tick * speed_multiplier, 2)


def ticks_to_ms_segmented(tick, ticks_per_quarter, tempo_map, speed_multiplier=1.0):
    """Like ticks_to_ms, but each tempo only covers the ticks up to the next change."""
    entries = tempo_map.items()
    ms_total = 0.0
    for i, (t0, tempo) in enumerate(entries):
        if tick <= t0:
            break

        if i + 1 < len(entries):
            t1 = entries[i + 1][0]
        else:
            t1 = tick

        dticks = min(t1, tick) - t0
        ms_total += dticks * (tempo / ticks_per_quarter) / 1000.0

        if tick < t1:
            break

    return round(ms_total * speed_multiplier, 2)


def get_timer(mode):
    if mode == "flat":
        return ticks_to_ms
    if mode == "segmented":
        return ticks_to_ms_segmented
    raise ValueError(f"Unknown tempo mode {mode!r}; expected one of {', '.join(TEMPO_MODES)}")
