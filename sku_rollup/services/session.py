from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from collections.abc import Callable, Collection
from dataclasses import dataclass

from ..excel.reader import DecodeError, UnsupportedFileTypeError, check_file_type, decode_workbook
from ..excel.writer import EncodeError, encode_rows
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import DEFAULT_MAX_SESSIONS
from ..models.view_state import RowCount, ViewState
from .projection import ALL_ROWS, InvalidRowCountError, parse_row_count
from .view import empty_view, load_view, select_row_count, select_sort, visible_rows, with_message

"""View sessions.

A ViewSession owns the ViewState of one browser (or one CLI file). Every
operation builds a new ViewState and swaps it in under a lock; readers
always see a complete state.

File loads are two-phase. ``begin_load`` hands out a LoadTicket, the caller
reads the file, ``complete_load`` decodes and installs the result only if no
later ``begin_load`` happened in between. A superseded completion is
dropped: the later selection wins.
"""

__all__ = [
    "LoadTicket",
    "SessionStore",
    "ViewSession",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadTicket:
    generation: int
    file_name: str


class ViewSession:
    def __init__(
        self,
        *,
        default_rows: RowCount = ALL_ROWS,
        locked_columns: Collection[str] = (),
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self._default_rows = default_rows
        self._locked_columns = frozenset(locked_columns)
        self._error_log = error_log
        self._lock = threading.Lock()
        self._generation = 0
        self._state = empty_view(default_rows)

    @property
    def state(self) -> ViewState:
        with self._lock:
            return self._state

    @property
    def locked_columns(self) -> frozenset[str]:
        return self._locked_columns

    def _fail(self, file_name: str, operation: str, error: Exception, ticket: LoadTicket | None = None) -> None:
        logger.error("%s failed file=%s: %s", operation, file_name, error)
        if self._error_log is not None:
            self._error_log.record(file_name, operation, error)
            self._error_log.flush()
        with self._lock:
            if ticket is None or ticket.generation == self._generation:
                self._state = with_message(self._state, str(error))

    # -- file loading -------------------------------------------------

    def begin_load(self, file_name: str) -> LoadTicket:
        with self._lock:
            self._generation += 1
            return LoadTicket(self._generation, file_name)

    def is_current(self, ticket: LoadTicket) -> bool:
        with self._lock:
            return ticket.generation == self._generation

    def complete_load(self, ticket: LoadTicket, payload: bytes) -> bool:
        """Decode ``payload`` and install it if ``ticket`` is still the latest load.

        Returns False when the load was superseded (nothing changes).
        Raises DecodeError after putting its message on the current view
        (unless superseded); the previously loaded data stays in place.
        """
        try:
            sheet = decode_workbook(payload)
        except DecodeError as e:
            self._fail(ticket.file_name, "decode", e, ticket)
            raise
        new_state = load_view(ticket.file_name, sheet, self._default_rows)
        with self._lock:
            if ticket.generation != self._generation:
                logger.info(
                    "discarding superseded load file=%s generation=%d latest=%d",
                    ticket.file_name,
                    ticket.generation,
                    self._generation,
                )
                return False
            self._state = new_state
        return True

    def load(self, file_name: str, read: Callable[[], bytes]) -> bool:
        """Type-check, then run a complete load cycle.

        ``read`` is only called after the type check passed and the ticket
        was issued.
        """
        try:
            check_file_type(file_name)
        except UnsupportedFileTypeError as e:
            self._fail(file_name, "upload", e)
            raise
        ticket = self.begin_load(file_name)
        return self.complete_load(ticket, read())

    # -- interaction --------------------------------------------------

    def notify(self, message: str | None) -> ViewState:
        """Put a user-visible message on the current view."""
        with self._lock:
            self._state = with_message(self._state, message)
            return self._state

    def sort(self, column: str) -> ViewState:
        with self._lock:
            self._state = select_sort(self._state, column, self._locked_columns)
            return self._state

    def set_row_count(self, raw: object) -> ViewState:
        try:
            row_count = parse_row_count(raw)
        except InvalidRowCountError as e:
            with self._lock:
                self._state = with_message(self._state, str(e))
            raise
        with self._lock:
            self._state = select_row_count(self._state, row_count)
            return self._state

    def export(self) -> bytes:
        """Encode exactly the visible rows; EncodeError leaves a message on the view."""
        state = self.state
        try:
            return encode_rows(visible_rows(state), state.columns)
        except EncodeError as e:
            self._fail(state.source_name or "", "export", e)
            raise


class SessionStore:
    """In-memory map of browser session id -> ViewSession.

    Holds at most ``max_sessions`` entries; the least recently used session
    is dropped when a new one would exceed the cap.
    """

    def __init__(self, factory: Callable[[], ViewSession], max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        if max_sessions < 1:
            raise ValueError(f"max_sessions must be >= 1, got {max_sessions}")
        self._factory = factory
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, ViewSession] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def get(self, session_id: str) -> ViewSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
                return session
            session = self._factory()
            self._sessions[session_id] = session
            while len(self._sessions) > self._max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.debug("evicted view session id=%s", evicted)
            return session

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
