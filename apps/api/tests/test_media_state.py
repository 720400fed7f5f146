"""Media item lifecycle rule tests."""

from __future__ import annotations

import unittest

from mediasync.domain.media_state import allowed_next_states, can_transition, is_terminal
from mediasync.schemas.media import MediaItemState


class MediaStateUnitTests(unittest.TestCase):
    def test_pending_can_move_to_ready_or_failed(self) -> None:
        self.assertTrue(can_transition(MediaItemState.PENDING, MediaItemState.READY))
        self.assertTrue(can_transition(MediaItemState.PENDING, MediaItemState.FAILED))
        self.assertEqual(
            allowed_next_states(MediaItemState.PENDING),
            [MediaItemState.FAILED, MediaItemState.READY],
        )

    def test_terminal_states_never_regress(self) -> None:
        for terminal_state in (MediaItemState.READY, MediaItemState.FAILED):
            with self.subTest(terminal_state=terminal_state):
                self.assertTrue(is_terminal(terminal_state))
                self.assertEqual(allowed_next_states(terminal_state), [])
                for target in MediaItemState:
                    self.assertFalse(can_transition(terminal_state, target))

    def test_pending_self_transition_is_rejected(self) -> None:
        self.assertFalse(is_terminal(MediaItemState.PENDING))
        self.assertFalse(can_transition(MediaItemState.PENDING, MediaItemState.PENDING))
