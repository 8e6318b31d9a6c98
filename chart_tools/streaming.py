"""
Streaming Completeness - Suppress errors while a block is still arriving

Chart blocks are re-parsed on every streamed token. A half-written block
fails to parse or validate, and reporting that immediately makes the error
flash on and off. looks_incomplete() recognizes the usual shapes of a block
that is still being typed; StreamingMonitor adds the timing rules (settle
delay, hard ceiling, rapid updates) on top of it.
"""

import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

SEPARATOR_ROW_PATTERN = re.compile(r"^\s*\|?\s*:?-+:?\s*(?:\|\s*:?-+:?\s*)*\|?\s*$")
BARE_KEY_PATTERN = re.compile(r"^\s*[\w-]+\s*:\s*$")


def is_separator_row(line: str) -> bool:
    """True for a table separator row such as |---|:---:|."""
    return "-" in line and bool(SEPARATOR_ROW_PATTERN.match(line))


def _cell_count(row: str) -> int:
    return len([cell for cell in row.split("|") if cell.strip()])


def pending_reasons(text: str) -> List[str]:
    """List the incompleteness signals that fire for text (empty when none)."""
    reasons = []
    if text.count("{") != text.count("}"):
        reasons.append("unbalanced braces")
    if text.count("[") != text.count("]"):
        reasons.append("unbalanced brackets")

    lines = [line for line in text.split("\n") if line.strip()]
    table_lines = [line for line in lines if "|" in line]
    if table_lines:
        separators = [line for line in table_lines if is_separator_row(line)]
        rows = [line for line in table_lines if not is_separator_row(line)]
        if not separators:
            reasons.append("table without separator row")
        elif len(rows) < 2:
            reasons.append("table without data rows")
        elif _cell_count(rows[-1]) <= _cell_count(rows[0]) - 2:
            reasons.append("last table row is short")

    if lines and "|" not in lines[-1] and BARE_KEY_PATTERN.match(lines[-1]):
        reasons.append("key without value")
    return reasons


def looks_incomplete(text: str) -> bool:
    """
    Guess whether block text is still being streamed.

    True when brackets or braces are unbalanced, when a table has rows but
    no separator yet, when a table has a separator but no data row, when
    the last table row is visibly shorter than the header, or when the last
    line is a bare "key:" with no value.

    Best effort: complete but malformed input may be reported as incomplete,
    which only delays the error.
    """
    return bool(pending_reasons(text))


class StreamDecision(str, Enum):
    """How a consumer should treat the current block text."""
    COMPLETE = "complete"
    WAITING = "waiting"
    RAPID_UPDATE = "rapid_update"


@dataclass
class _ObservedState:
    text: Optional[str] = None
    first_seen: Optional[float] = None
    last_change: Optional[float] = None


class StreamingMonitor:
    """
    Caller-owned timing state for one block being streamed.

    Example:
        monitor = StreamingMonitor()
        decision = monitor.observe(block_text, source_id="msg-3/block-1")
        if decision is StreamDecision.COMPLETE:
            show_errors()
    """

    def __init__(
        self,
        settle_delay: float = 0.4,
        hard_timeout: float = 5.0,
        rapid_update_window: float = 0.15,
    ):
        """
        Args:
            settle_delay: Seconds the text must stay unchanged before an
                incomplete-looking block is reported as complete
            hard_timeout: Seconds after first sight after which the block is
                always reported as complete
            rapid_update_window: Changes closer together than this are
                reported as rapid updates
        """
        self.settle_delay = settle_delay
        self.hard_timeout = hard_timeout
        self.rapid_update_window = rapid_update_window
        self.source_id: Optional[Any] = None
        self._state = _ObservedState()

    @classmethod
    def from_config(cls, config: Any) -> "StreamingMonitor":
        """Build from an object with settle_delay/hard_timeout/rapid_update_window."""
        return cls(
            settle_delay=config.settle_delay,
            hard_timeout=config.hard_timeout,
            rapid_update_window=config.rapid_update_window,
        )

    def reset(self) -> None:
        """Forget everything observed so far."""
        self._state = _ObservedState()

    def observe(
        self,
        text: str,
        now: Optional[float] = None,
        source_id: Optional[Any] = None,
    ) -> StreamDecision:
        """
        Record the current block text and decide how to treat it.

        Args:
            text: Current block text
            now: Monotonic timestamp in seconds (time.monotonic() if None)
            source_id: Identity of the block; a new identity resets state

        Returns:
            StreamDecision
        """
        if now is None:
            now = time.monotonic()

        if source_id is not None and source_id != self.source_id:
            self.reset()
            self.source_id = source_id

        state = self._state
        if state.first_seen is None:
            state.first_seen = now
            state.last_change = now
            state.text = text
            since_previous = None
        elif text != state.text:
            since_previous = now - state.last_change
            state.last_change = now
            state.text = text
        else:
            since_previous = None

        if now - state.first_seen >= self.hard_timeout:
            return StreamDecision.COMPLETE

        if since_previous is not None and since_previous < self.rapid_update_window:
            return StreamDecision.RAPID_UPDATE

        if looks_incomplete(text) and now - state.last_change < self.settle_delay:
            return StreamDecision.WAITING

        return StreamDecision.COMPLETE

