"""Tests for handcatch.audio - blip synthesis and mixing (no audio device needed)."""
from __future__ import annotations

import numpy as np
import pytest

from handcatch.audio import CatchChime, make_blip, midi_to_freq


class TestSynthesis:
    def test_midi_to_freq(self) -> None:
        assert midi_to_freq(69) == pytest.approx(440.0)
        assert midi_to_freq(81) == pytest.approx(880.0)

    def test_blip_shape_and_decay(self) -> None:
        blip = make_blip(880.0, duration_ms=100, sample_rate=8000, volume=0.5)
        assert blip.dtype == np.float32
        assert len(blip) == 800
        assert np.abs(blip).max() <= 0.5
        assert np.abs(blip[:100]).max() > np.abs(blip[-100:]).max()


class TestMix:
    def test_silence_without_catches(self) -> None:
        chime = CatchChime(sample_rate=8000)
        out = chime.mix(256)
        assert out.shape == (256,)
        assert not out.any()

    def test_play_is_consumed_over_blocks(self) -> None:
        chime = CatchChime(sample_rate=8000)
        chime.play()
        total = []
        for _ in range(10):
            total.append(chime.mix(256))
        audio = np.concatenate(total)
        assert audio[:100].any()
        assert not audio[-256:].any()
        assert chime._voices == []

    def test_overlapping_catches_are_clipped(self) -> None:
        chime = CatchChime(sample_rate=8000, volume=1.0)
        for _ in range(8):
            chime.play()
        out = chime.mix(512)
        assert out.max() <= 1.0
        assert out.min() >= -1.0

    def test_stop_before_start(self) -> None:
        chime = CatchChime()
        chime.stop()
        assert chime.active is False
