"""
Cart sync state machine.

Validates the transitions of the cart view between UNAUTHENTICATED, SYNCING
and READY. Every reconciliation passes through SYNCING; READY is only reachable
from SYNCING, and any state can drop back to UNAUTHENTICATED on logout or a
failed load.
"""

import logging
from typing import Dict, List, Set

from enums.cart_sync_state import CartSyncState
from exceptions.cart import InvalidCartStateException

logger = logging.getLogger(__name__)


class CartSyncTransition:
    """Represents a valid sync state transition with metadata"""

    def __init__(self, from_state: CartSyncState, to_state: CartSyncState, description: str = ""):
        self.from_state = from_state
        self.to_state = to_state
        self.description = description

    def __repr__(self):
        return f"{self.from_state.value} -> {self.to_state.value}"


class CartStateMachine:
    """
    Finite state machine for cart sync state transitions.

    Valid transitions:
    - UNAUTHENTICATED -> SYNCING (login, or a mutation after a failed load)
    - SYNCING -> READY (remote cart fetched and re-derived)
    - SYNCING -> UNAUTHENTICATED (logout mid-flight, or load failed)
    - SYNCING -> SYNCING (overlapping mutations)
    - READY -> SYNCING (mutation or manual sync)
    - READY -> UNAUTHENTICATED (logout)

    Staying in the same state is always allowed. UNAUTHENTICATED -> READY is
    rejected: items are never shown as reconciled without a fetch.
    """

    VALID_TRANSITIONS: List[CartSyncTransition] = [
        CartSyncTransition(
            CartSyncState.UNAUTHENTICATED,
            CartSyncState.SYNCING,
            description="Login or mutation started a remote fetch"
        ),
        CartSyncTransition(
            CartSyncState.SYNCING,
            CartSyncState.READY,
            description="Remote cart fetched and re-derived"
        ),
        CartSyncTransition(
            CartSyncState.SYNCING,
            CartSyncState.UNAUTHENTICATED,
            description="Logout during sync or cart could not be loaded"
        ),
        CartSyncTransition(
            CartSyncState.SYNCING,
            CartSyncState.SYNCING,
            description="Another mutation issued while one is in flight"
        ),
        CartSyncTransition(
            CartSyncState.READY,
            CartSyncState.SYNCING,
            description="Mutation or manual refresh"
        ),
        CartSyncTransition(
            CartSyncState.READY,
            CartSyncState.UNAUTHENTICATED,
            description="Logout"
        ),
    ]

    _transition_map: Dict[CartSyncState, Set[CartSyncState]] = {}
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        """Build internal transition maps for lookup"""
        if cls._transition_map:
            return  # Already built

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_state, set()).add(transition.to_state)
            cls._transition_descriptions[(transition.from_state, transition.to_state)] = transition.description

    @classmethod
    def is_valid_transition(cls, from_state: CartSyncState, to_state: CartSyncState) -> bool:
        """
        Check if a sync state transition is valid.

        Args:
            from_state: Current sync state
            to_state: Desired sync state

        Returns:
            True if transition is valid, False otherwise
        """
        cls._build_transition_map()

        # Allow staying in same state (no-op)
        if from_state == to_state:
            return True

        return to_state in cls._transition_map.get(from_state, set())

    @classmethod
    def validate_transition(cls, from_state: CartSyncState, to_state: CartSyncState) -> None:
        """
        Raises:
            InvalidCartStateException: If the transition is not allowed
        """
        if not cls.is_valid_transition(from_state, to_state):
            logger.error(f"Invalid cart sync transition: {from_state.value} -> {to_state.value}")
            raise InvalidCartStateException(from_state.value, to_state.value)
        if from_state != to_state:
            logger.debug(f"CART_SYNC_TRANSITION: {from_state.value} -> {to_state.value}: "
                         f"{cls.get_transition_description(from_state, to_state)}")

    @classmethod
    def get_valid_transitions(cls, from_state: CartSyncState) -> List[CartSyncState]:
        """
        Get all valid next states from the current state (same-state no-op excluded
        unless it is an explicit transition).
        """
        cls._build_transition_map()
        return sorted(cls._transition_map.get(from_state, set()), key=lambda s: s.value)

    @classmethod
    def get_transition_description(cls, from_state: CartSyncState, to_state: CartSyncState) -> str:
        cls._build_transition_map()
        return cls._transition_descriptions.get(
            (from_state, to_state),
            f"Transition from {from_state.value} to {to_state.value}"
        )
