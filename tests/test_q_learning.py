from dataclasses import dataclass

import numpy as np
import pytest

from rl_qtable.env import FaceGrid
from rl_qtable.q_learning import QLearner, greedy_rollout
from rl_qtable.q_table import QTable, select_best_action


@dataclass(frozen=True)
class LineState:
    """Positions 0..length on a line; the far end is the goal."""
    pos: int
    length: int = 4

    def legal_actions(self):
        if self.pos == self.length:
            return []
        return ["left", "right"] if self.pos > 0 else ["right"]

    def make_transition(self, action):
        return LineState(self.pos + (1 if action == "right" else -1), self.length)

    @property
    def reward_for_last_move(self):
        return 1.0 if self.pos == self.length else 0.0

    def select_best_action(self, actions, rng):
        return select_best_action(actions, rng)


def test_learner_finds_the_goal() -> None:
    table = QTable(LineState(0), rng=np.random.default_rng(7))
    learner = QLearner(table, learning_rate=0.5, future_reward_discount=0.9, max_steps=100)

    returns = learner.learn(300)

    assert len(returns) == 300
    path = greedy_rollout(table, LineState(0))
    assert [s.pos for s in path] == [0, 1, 2, 3, 4]
    assert table.get_actions(LineState(3))["right"] == pytest.approx(1.0, abs=1e-3)


def test_episode_stops_at_max_steps() -> None:
    table = QTable(LineState(0, length=50), rng=np.random.default_rng(0))
    learner = QLearner(table, max_steps=3)
    assert learner.run_episode(LineState(0, length=50), episode_number=1) == 0.0


def test_episode_from_terminal_state_is_empty() -> None:
    table = QTable(LineState(0), rng=np.random.default_rng(0))
    learner = QLearner(table)
    assert learner.run_episode(LineState(4), episode_number=1) == 0.0
    assert all(v == 0.0 for actions in table.table.values() for v in actions.values())


def test_learn_reports_every_episode_and_uses_start_states() -> None:
    grid = FaceGrid(grid_size=5, target_cells=frozenset({(2, 2)}))
    rng = np.random.default_rng(1)
    table = QTable(grid.random_start(rng), rng=rng)
    learner = QLearner(table, learning_rate=0.3, future_reward_discount=0.95, max_steps=50)
    seen = []

    returns = learner.learn(20, start_states=grid.random_start, callback=lambda ep, r: seen.append((ep, r)))

    assert [ep for ep, _ in seen] == list(range(1, 21))
    assert [r for _, r in seen] == returns


def test_learner_rejects_non_positive_step_limit() -> None:
    table = QTable(LineState(0), rng=np.random.default_rng(0))
    with pytest.raises(ValueError):
        QLearner(table, max_steps=0)


def test_greedy_rollout_respects_max_steps() -> None:
    table = QTable(LineState(0), rng=np.random.default_rng(0))
    table.get_actions(LineState(1))["left"] = 1.0
    table.get_actions(LineState(0))["right"] = 1.0
    path = greedy_rollout(table, LineState(0), max_steps=5)
    assert [s.pos for s in path] == [0, 1, 0, 1, 0, 1]
