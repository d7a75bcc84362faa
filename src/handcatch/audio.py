from __future__ import annotations

import logging
import threading
from typing import List, Optional

import numpy as np


logger = logging.getLogger(__name__)


CATCH_MIDI_NOTES = [72, 76, 79, 84]  # C5 E5 G5 C6, cycled per catch


def midi_to_freq(midi_note: int) -> float:
    """Convert MIDI note number to frequency in Hz."""
    return 440.0 * (2.0 ** ((midi_note - 69) / 12.0))


def make_blip(freq_hz: float, duration_ms: float = 90.0, sample_rate: int = 44100, volume: float = 0.2) -> np.ndarray:
    """A short sine blip with a fast exponential decay, as float32 mono samples."""
    n = max(1, int(sample_rate * duration_ms / 1000.0))
    t = np.arange(n, dtype=np.float32) / float(sample_rate)
    env = np.exp(-t * 40.0).astype(np.float32)
    return (volume * np.sin(2.0 * np.pi * freq_hz * t) * env).astype(np.float32)


class CatchChime:
    """
    Plays a blip on every catch through a sounddevice output stream.

    Blips are mixed in the audio callback, so `play()` is safe from the game loop.
    """

    def __init__(self, sample_rate: int = 44100, volume: float = 0.2) -> None:
        self.sample_rate = sample_rate
        self.volume = max(0.0, min(1.0, volume))
        self._blips = [make_blip(midi_to_freq(n), sample_rate=sample_rate, volume=self.volume) for n in CATCH_MIDI_NOTES]
        self._next = 0
        self._voices: List[List] = []  # [samples, offset]
        self._lock = threading.Lock()
        self._stream = None

    @property
    def active(self) -> bool:
        return self._stream is not None

    def start(self) -> bool:
        """Open the output stream. Returns False (and logs) when no audio device is usable."""
        if self._stream is not None:
            return True
        try:
            # Importing fails with OSError when the PortAudio library is missing.
            import sounddevice as sd
        except OSError as e:
            logger.warning("catch sound disabled: %s", e)
            return False

        try:
            stream = sd.OutputStream(
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                callback=self._audio_callback,
                blocksize=512,
            )
            stream.start()
        except (OSError, sd.PortAudioError) as e:
            logger.warning("catch sound disabled: %s", e)
            return False
        self._stream = stream
        return True

    def stop(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.stop()
            stream.close()

    def play(self) -> None:
        with self._lock:
            blip = self._blips[self._next % len(self._blips)]
            self._next += 1
            self._voices.append([blip, 0])

    def mix(self, frames: int) -> np.ndarray:
        """Mix and consume up to `frames` samples of the queued blips."""
        out = np.zeros(frames, dtype=np.float32)
        with self._lock:
            alive = []
            for voice in self._voices:
                samples, offset = voice
                chunk = samples[offset : offset + frames]
                out[: len(chunk)] += chunk
                voice[1] = offset + len(chunk)
                if voice[1] < len(samples):
                    alive.append(voice)
            self._voices = alive
        np.clip(out, -1.0, 1.0, out=out)
        return out

    def _audio_callback(self, outdata, frames, time_info, status) -> None:
        outdata[:, 0] = self.mix(frames)

    def __enter__(self) -> "CatchChime":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
