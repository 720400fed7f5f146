"""Media item lifecycle transition rules."""

from mediasync.schemas.media import MediaItemState

_TERMINAL_STATES: set[MediaItemState] = {
    MediaItemState.READY,
    MediaItemState.FAILED,
}

_ALLOWED_TRANSITIONS: dict[MediaItemState, set[MediaItemState]] = {
    MediaItemState.PENDING: {MediaItemState.READY, MediaItemState.FAILED},
    MediaItemState.READY: set(),
    MediaItemState.FAILED: set(),
}


def allowed_next_states(state: MediaItemState) -> list[MediaItemState]:
    """Return deterministically ordered allowed successors for a state."""
    return sorted(_ALLOWED_TRANSITIONS.get(state, set()), key=lambda s: s.value)


def is_terminal(state: MediaItemState) -> bool:
    return state in _TERMINAL_STATES


def can_transition(old_state: MediaItemState, new_state: MediaItemState) -> bool:
    if is_terminal(old_state):
        return False
    return new_state in _ALLOWED_TRANSITIONS.get(old_state, set())
