import numpy as np
import pytest

from rl_qtable.env import FaceGrid, FaceGridState
from rl_qtable.q_table import QTable, State
from rl_qtable.utils import synthetic_face


def _small_grid() -> FaceGrid:
    return FaceGrid(grid_size=4, target_cells=frozenset({(0, 0)}), step_cost=0.1, goal_reward=2.0)


def test_state_is_a_table_state() -> None:
    assert isinstance(_small_grid().state_at(1, 1), State)


def test_legal_actions_respect_board_edges() -> None:
    grid = _small_grid()
    assert grid.state_at(3, 3).legal_actions() == ["up", "left"]
    assert grid.state_at(1, 2).legal_actions() == ["up", "down", "left", "right"]
    assert grid.state_at(0, 3).legal_actions() == ["down", "left"]


def test_target_cell_is_terminal_and_pays_goal_reward() -> None:
    grid = _small_grid()
    target = grid.state_at(0, 0)
    assert target.is_target
    assert target.legal_actions() == []
    assert target.reward_for_last_move == 2.0
    assert grid.state_at(2, 2).reward_for_last_move == pytest.approx(-0.1)


def test_transition_moves_one_cell() -> None:
    grid = _small_grid()
    state = grid.state_at(2, 2)
    assert state.make_transition("up").cell == (1, 2)
    assert state.make_transition("down").cell == (3, 2)
    assert state.make_transition("left").cell == (2, 1)
    assert state.make_transition("right").cell == (2, 3)


def test_states_hash_by_cell() -> None:
    grid = _small_grid()
    assert grid.state_at(1, 1) == FaceGridState(1, 1, grid)
    assert len({grid.state_at(1, 1), grid.state_at(1, 1), grid.state_at(1, 2)}) == 2
    assert str(grid.state_at(1, 2)) == "(1,2)"


def test_table_over_grid_covers_every_cell() -> None:
    grid = _small_grid()
    table = QTable(grid.state_at(3, 3), rng=np.random.default_rng(0))
    assert len(table) == grid.num_cells
    assert table.get_actions(grid.state_at(0, 0)) == {}
    assert table.get_actions(grid.state_at(0, 1)) == {"down": 0.0, "left": 0.0, "right": 0.0}


def test_random_start_avoids_targets() -> None:
    grid = FaceGrid(grid_size=2, target_cells=frozenset({(0, 0), (0, 1), (1, 0)}))
    rng = np.random.default_rng(0)
    assert {grid.random_start(rng).cell for _ in range(20)} == {(1, 1)}


def test_invalid_grids_are_rejected() -> None:
    with pytest.raises(ValueError):
        FaceGrid(grid_size=3, target_cells=frozenset())
    with pytest.raises(ValueError):
        FaceGrid(grid_size=3, target_cells=frozenset({(3, 0)}))
    full = FaceGrid(grid_size=1, target_cells=frozenset({(0, 0)}))
    with pytest.raises(ValueError):
        full.random_start(np.random.default_rng(0))
    with pytest.raises(ValueError):
        _small_grid().state_at(4, 0)


def test_from_image_uses_face_targets() -> None:
    image = synthetic_face(64)
    grid = FaceGrid.from_image(image, grid_size=16, targets=("eyes",))
    assert grid.grid_size == 16
    assert grid.target_cells
    assert all(4 <= r <= 6 for r, _ in grid.target_cells)
    with pytest.raises(ValueError):
        FaceGrid.from_image(image, grid_size=65)
