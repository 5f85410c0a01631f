"""Remote job lifecycle rules as observed by the poller."""

from encoding_orchestrator.schemas.media import JobState

TERMINAL_STATES: frozenset[JobState] = frozenset(
    {
        JobState.FINISHED,
        JobState.ERROR,
        JobState.CANCELED,
    }
)

FAILED_STATES: frozenset[JobState] = frozenset({JobState.ERROR, JobState.CANCELED})

# The service may skip intermediate states between two polls, so successors are transitive.
_EXPECTED_TRANSITIONS: dict[JobState, set[JobState]] = {
    JobState.QUEUED: {
        JobState.QUEUED,
        JobState.SCHEDULED,
        JobState.PROCESSING,
        JobState.CANCELING,
        JobState.FINISHED,
        JobState.ERROR,
        JobState.CANCELED,
    },
    JobState.SCHEDULED: {
        JobState.SCHEDULED,
        JobState.PROCESSING,
        JobState.CANCELING,
        JobState.FINISHED,
        JobState.ERROR,
        JobState.CANCELED,
    },
    JobState.PROCESSING: {
        JobState.PROCESSING,
        JobState.CANCELING,
        JobState.FINISHED,
        JobState.ERROR,
        JobState.CANCELED,
    },
    JobState.CANCELING: {JobState.CANCELING, JobState.CANCELED, JobState.ERROR},
    JobState.FINISHED: set(),
    JobState.ERROR: set(),
    JobState.CANCELED: set(),
}


def is_terminal(state: JobState) -> bool:
    return state in TERMINAL_STATES


def is_failed(state: JobState) -> bool:
    return state in FAILED_STATES


def expected_next_states(state: JobState) -> list[JobState]:
    """Return deterministically ordered successors the poller may observe after a state."""
    return sorted(_EXPECTED_TRANSITIONS.get(state, set()), key=lambda s: s.value)


def is_expected_transition(old_state: JobState | None, new_state: JobState) -> bool:
    if old_state is None:
        return True
    return new_state in _EXPECTED_TRANSITIONS.get(old_state, set())
