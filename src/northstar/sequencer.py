"""
Timed signal sequencer.

Plays a Morse timeline against a brightness output, one pulse at a time,
on a cooperative single-threaded scheduler. Any object with
``call_later(delay_seconds, callback)`` returning a handle with
``cancel()`` works; an asyncio event loop is the usual one.

State machine::

    IDLE --play()--> PLAYING --last pulse done--> IDLE
                        |  \\--stop()------------> IDLE
                        \\---play()--> (stop, then PLAYING with new timeline)
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Tuple

from .morse import MorseTiming, Pulse, PulseKind, encode


logger = logging.getLogger(__name__)

Callback = Optional[Callable[[], Any]]


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class SequencerState(Enum):
    IDLE = "idle"
    PLAYING = "playing"


class SignalSequencer:
    """
    Morse timeline player driving a brightness scalar.

    Args:
        scheduler: Cancellable-timer scheduler (e.g. an asyncio loop)
        timing: Morse pulse durations
        on_brightness: Brightness during an "on" pulse
        off_brightness: Brightness during an "off" pulse
        idle_brightness: Brightness restored when not playing
    """

    def __init__(self, scheduler: Scheduler,
                 timing: MorseTiming = MorseTiming(),
                 on_brightness: float = 1.0,
                 off_brightness: float = 0.0,
                 idle_brightness: float = 1.0):
        self.scheduler = scheduler
        self.timing = timing
        self.on_brightness = on_brightness
        self.off_brightness = off_brightness
        self.idle_brightness = idle_brightness

        self.state = SequencerState.IDLE
        self.brightness = idle_brightness
        self.timeline: Tuple[Pulse, ...] = ()
        self.cursor = 0

        self._handle: Optional[TimerHandle] = None
        self._generation = 0
        self._on: Callback = None
        self._off: Callback = None
        self._complete: Callback = None

    @property
    def is_playing(self) -> bool:
        return self.state is SequencerState.PLAYING

    def play(self, text: str, on: Callback = None, off: Callback = None,
             complete: Callback = None) -> Tuple[Pulse, ...]:
        """
        Start playing ``text``, replacing any run in progress.

        Args:
            text: Text to signal
            on: Called at the start of each "on" pulse
            off: Called at the start of each "off" pulse, and once on stop
            complete: Called when the timeline runs out

        Returns:
            The timeline being played
        """
        # An off callback fired by stop() may itself start a run
        while self.is_playing:
            self.stop()

        self._generation += 1
        self.timeline = encode(text, self.timing)
        self.cursor = 0
        self._on = on
        self._off = off
        self._complete = complete
        self.state = SequencerState.PLAYING

        logger.info(f"Playing {text!r}: {len(self.timeline)} pulses")
        self._step(self._generation)
        return self.timeline

    def stop(self) -> None:
        """Cancel the run in progress. Does nothing while idle."""
        if not self.is_playing:
            return

        self._generation += 1
        self._cancel_timer()
        self.state = SequencerState.IDLE
        self.brightness = self.idle_brightness

        off = self._off
        self._clear_callbacks()
        logger.debug("Sequencer stopped")
        if off is not None:
            off()

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _clear_callbacks(self) -> None:
        self._on = None
        self._off = None
        self._complete = None

    def _step(self, generation: int) -> None:
        # Timers from a cancelled run must not touch the new one
        if generation != self._generation or not self.is_playing:
            return
        self._handle = None

        if self.cursor >= len(self.timeline):
            self._finish()
            return

        pulse = self.timeline[self.cursor]
        self.cursor += 1

        if pulse.kind is PulseKind.ON:
            self.brightness = self.on_brightness
            callback = self._on
        else:
            self.brightness = self.off_brightness
            callback = self._off
        if callback is not None:
            callback()

        # The callback may have restarted or stopped the sequencer
        if generation != self._generation:
            return

        self._handle = self.scheduler.call_later(
            pulse.duration_ms / 1000.0, self._step, generation
        )

    def _finish(self) -> None:
        complete = self._complete
        self.state = SequencerState.IDLE
        self.brightness = self.idle_brightness
        self._clear_callbacks()
        logger.info("Sequence complete")
        if complete is not None:
            complete()
