import math
from collections import deque
from itertools import islice
from typing import Protocol, runtime_checkable

import numpy as np

DEFAULT_EPS = 0.01
EPS_DROPOFF = 5.0


class UnknownStateError(KeyError):
    """Raised when a state is looked up that the table does not contain."""


class UnknownActionError(KeyError):
    """Raised when an update names an action the state does not offer."""


class TerminalStateError(ValueError):
    """Raised when an action is requested from a state with no legal actions."""


@runtime_checkable
class State(Protocol):
    """
    What the table needs from a problem's states.
    States must be immutable and hashable; actions only need to be hashable.
    """

    def legal_actions(self): ...

    def make_transition(self, action): ...

    @property
    def reward_for_last_move(self): ...

    def select_best_action(self, actions, rng): ...


def select_best_action(actions, rng):
    """Pick the (action, value) pair with the highest value; ties are broken uniformly with rng."""
    if len(actions) == 0:
        raise TerminalStateError("Cannot pick a best action from an empty action list.")
    values = np.array([value for _, value in actions], dtype=float)
    known = ~np.isnan(values)
    if known.any():
        best = np.flatnonzero(values == values[known].max())
    else:
        best = np.arange(len(values))  # nothing comparable, treat all as tied
    return actions[int(rng.choice(best))]


class QTable:
    """
    Map from states to their legal actions and the estimated value of taking each one.

    If no table is given, every state reachable from initial_state is discovered up front
    and all of its actions start at 0.0. After that only the values change.

    Parameters
    ----------
    initial_state : State
        Starting state used to discover the rest of the state space.
    table : dict, optional
        Pre-built {state: {action: value}} mapping. Used as-is when provided.
    epsilon : float
        Base exploration rate; the effective rate decays towards it over episodes.
    rng : numpy.random.Generator, optional
        Random source for exploration and tie-breaking. Seed it for repeatable runs.
    """

    def __init__(self, initial_state, table=None, epsilon=DEFAULT_EPS, rng=None):
        self.initial_state = initial_state
        self.epsilon = epsilon
        self.rng = np.random.default_rng() if rng is None else rng
        self.table = _build_table(initial_state) if table is None else table

    def __len__(self):
        return len(self.table)

    def __contains__(self, state):
        return state in self.table

    def __repr__(self):
        return f"QTable(numEntries={len(self.table)})"

    def _lookup(self, state):
        try:
            return self.table[state]
        except KeyError:
            raise UnknownStateError(f"State {state!r} is not in the table.") from None

    def get_actions(self, state):
        """Live action -> value mapping for state (not a copy)."""
        return self._lookup(state)

    def get_possible_actions(self, state):
        """Snapshot of (action, value) pairs for state, in table order."""
        return list(self._lookup(state).items())

    def get_best_move(self, state):
        """Highest-valued (action, value) pair for state, ties broken with the table rng."""
        actions = self.get_possible_actions(state)
        if not actions:
            raise TerminalStateError(f"State {state!r} has no legal actions.")
        return state.select_best_action(actions, self.rng)

    def exploration_probability(self, episode_number):
        # Decays towards epsilon; early (or negative) episode numbers explore more.
        denominator = episode_number + EPS_DROPOFF
        if denominator == 0:
            return math.inf
        return self.epsilon + EPS_DROPOFF / denominator

    def get_next_action(self, state, episode_number):
        """Epsilon-greedy choice of an (action, value) pair for state."""
        actions = self.get_possible_actions(state)
        if not actions:
            raise TerminalStateError(f"State {state!r} has no legal actions.")
        if self.rng.random() < self.exploration_probability(episode_number):
            return actions[int(self.rng.integers(0, len(actions)))]
        return state.select_best_action(actions, self.rng)

    def update(self, state, action, next_state, learning_rate, future_reward_discount=1.0):
        """
        One-step Q-learning update of the value stored for (state, action).

        action is an (action, value) pair as returned by get_next_action / get_best_move.
        The value stored in the table is what gets updated, not the value in the pair.
        """
        move = action[0]
        actions = self._lookup(state)
        if move not in actions:
            raise UnknownActionError(f"Action {move!r} is not legal in state {state!r}.")
        next_actions = self._lookup(next_state)

        if next_actions:
            future_value = next_state.select_best_action(list(next_actions.items()), self.rng)[1]
        else:
            future_value = 0.0  # terminal
        reward = next_state.reward_for_last_move

        old_value = actions[move]
        actions[move] = old_value + learning_rate * (reward + future_reward_discount * future_value - old_value)

    def get_first_n_entries_with_non0_actions(self, n):
        """Debug helper: the first n entries whose action values sum to more than 0."""
        entries = ((state, actions) for state, actions in self.table.items() if sum(actions.values()) > 0.0)
        return "\n".join(f"{state}: {actions}" for state, actions in islice(entries, max(n, 0)))


def _build_table(initial_state):
    table = {}
    pending = deque([initial_state])
    while pending:
        state = pending.popleft()
        if state in table:
            continue
        actions = {action: 0.0 for action in state.legal_actions()}
        table[state] = actions
        pending.extend(state.make_transition(action) for action in actions)
    return table
