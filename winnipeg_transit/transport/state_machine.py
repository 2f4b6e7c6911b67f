"""State machine for a single API request."""

from enum import Enum

import structlog


logger = structlog.get_logger()


class RequestState(str, Enum):
    """State of a request during dispatch.

    States represent the lifecycle of a single round-trip:
    - REQUEST_BUILT: Request constructed, not yet sent
    - REQUEST_DISPATCHED: Response received, body still open
    - REQUEST_CANCELLED: Context canceled or expired
    - REQUEST_TRANSPORT_FAILED: Network-level failure
    - REQUEST_STATUS_REJECTED: Non-2xx response
    - REQUEST_DECODED: Body decoded (or discarded) successfully
    - REQUEST_RAW_COPIED: Body copied to a raw sink
    - REQUEST_DECODE_FAILED: Body could not be decoded
    """

    REQUEST_BUILT = "REQUEST_BUILT"
    REQUEST_DISPATCHED = "REQUEST_DISPATCHED"
    REQUEST_CANCELLED = "REQUEST_CANCELLED"
    REQUEST_TRANSPORT_FAILED = "REQUEST_TRANSPORT_FAILED"
    REQUEST_STATUS_REJECTED = "REQUEST_STATUS_REJECTED"
    REQUEST_DECODED = "REQUEST_DECODED"
    REQUEST_RAW_COPIED = "REQUEST_RAW_COPIED"
    REQUEST_DECODE_FAILED = "REQUEST_DECODE_FAILED"


_TERMINAL_STATES = frozenset(
    {
        RequestState.REQUEST_CANCELLED,
        RequestState.REQUEST_TRANSPORT_FAILED,
        RequestState.REQUEST_STATUS_REJECTED,
        RequestState.REQUEST_DECODED,
        RequestState.REQUEST_RAW_COPIED,
        RequestState.REQUEST_DECODE_FAILED,
    }
)

# Valid state transitions; there is no retry loop
_VALID_TRANSITIONS: dict[RequestState, set[RequestState]] = {
    RequestState.REQUEST_BUILT: {
        RequestState.REQUEST_DISPATCHED,
        RequestState.REQUEST_CANCELLED,
        RequestState.REQUEST_TRANSPORT_FAILED,
    },
    RequestState.REQUEST_DISPATCHED: {
        RequestState.REQUEST_STATUS_REJECTED,
        RequestState.REQUEST_DECODED,
        RequestState.REQUEST_RAW_COPIED,
        RequestState.REQUEST_DECODE_FAILED,
        RequestState.REQUEST_CANCELLED,
        # Body read failed after the headers arrived
        RequestState.REQUEST_TRANSPORT_FAILED,
    },
    **{state: set() for state in _TERMINAL_STATES},
}


class RequestStateTransitionError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(self, from_state: RequestState, to_state: RequestState) -> None:
        """Initialize the transition error.

        Args:
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal request state transition: {from_state.value} -> {to_state.value}"
        )


class RequestStateMachine:
    """Tracks the lifecycle of one request.

    Enforces valid transitions and logs every state change at debug level.
    """

    def __init__(self, method: str, url: str) -> None:
        """Initialize the state machine in REQUEST_BUILT.

        Args:
            method: HTTP method, for logging.
            url: Sanitized request URL, for logging.
        """
        self._state = RequestState.REQUEST_BUILT
        self._log = logger.bind(component="transport", method=method, url=url)

    @property
    def state(self) -> RequestState:
        """Get the current state."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal."""
        return self._state in _TERMINAL_STATES

    def can_transition_to(self, target: RequestState) -> bool:
        """Check if a transition to the target state is valid."""
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: RequestState) -> None:
        """Transition to a new state.

        Args:
            target: The target state.

        Raises:
            RequestStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise RequestStateTransitionError(self._state, target)

        old_state = self._state
        self._state = target
        self._log.debug(
            "state_transition",
            from_state=old_state.value,
            to_state=target.value,
        )

    def to_dispatched(self) -> None:
        """Transition to REQUEST_DISPATCHED state."""
        self.transition_to(RequestState.REQUEST_DISPATCHED)

    def to_cancelled(self) -> None:
        """Transition to REQUEST_CANCELLED state."""
        self.transition_to(RequestState.REQUEST_CANCELLED)

    def to_transport_failed(self) -> None:
        """Transition to REQUEST_TRANSPORT_FAILED state."""
        self.transition_to(RequestState.REQUEST_TRANSPORT_FAILED)

    def to_status_rejected(self) -> None:
        """Transition to REQUEST_STATUS_REJECTED state."""
        self.transition_to(RequestState.REQUEST_STATUS_REJECTED)

    def to_decoded(self) -> None:
        """Transition to REQUEST_DECODED state."""
        self.transition_to(RequestState.REQUEST_DECODED)

    def to_raw_copied(self) -> None:
        """Transition to REQUEST_RAW_COPIED state."""
        self.transition_to(RequestState.REQUEST_RAW_COPIED)

    def to_decode_failed(self) -> None:
        """Transition to REQUEST_DECODE_FAILED state."""
        self.transition_to(RequestState.REQUEST_DECODE_FAILED)
