"""Tests for cancelable frame playback."""

import threading
import time

import pytest

from config import MONTH_LABELS
from visualization.playback import FramePlayer


class TestFramePlayer:
    def test_starts_at_first_frame(self):
        assert FramePlayer().current == MONTH_LABELS[0]

    def test_advance_wraps(self):
        player = FramePlayer(["a", "b"])
        assert player.advance() == "b"
        assert player.advance() == "a"

    def test_seek(self):
        player = FramePlayer()
        player.seek("Sept.")
        assert player.current == "Sept."
        with pytest.raises(ValueError):
            player.seek("Smarch")

    def test_empty_labels_rejected(self):
        with pytest.raises(ValueError):
            FramePlayer([])

    def test_play_yields_in_order(self):
        player = FramePlayer(["a", "b", "c"], interval_s=0.0)
        assert list(player.play(max_frames=5)) == ["a", "b", "c", "a", "b"]
        assert not player.is_playing

    def test_play_from_seek_position(self):
        player = FramePlayer(["a", "b", "c"], interval_s=0.0)
        player.seek("c")
        assert list(player.play(max_frames=2)) == ["c", "a"]

    def test_stop_from_consumer(self):
        player = FramePlayer(["a", "b", "c"], interval_s=0.0)
        frames = []
        for label in player.play():
            frames.append(label)
            assert player.is_playing
            if len(frames) == 2:
                player.stop()
        assert frames == ["a", "b"]
        assert not player.is_playing

    def test_stop_interrupts_wait(self):
        player = FramePlayer(["a", "b"], interval_s=30.0)
        threading.Timer(0.05, player.stop).start()
        started = time.monotonic()
        assert list(player.play()) == ["a"]
        assert time.monotonic() - started < 5.0

    def test_replay_after_stop(self):
        player = FramePlayer(["a", "b"], interval_s=0.0)
        player.stop()
        assert list(player.play(max_frames=2)) == ["a", "b"]

    def test_abandoned_iterator_ends_playback(self):
        # A page rerun drops the generator mid-play without calling stop()
        player = FramePlayer(["a", "b"], interval_s=0.0)
        frames = player.play()
        assert next(frames) == "a"
        assert player.is_playing
        frames.close()
        assert not player.is_playing
