from dataclasses import dataclass, field

from .q_table import select_best_action
from .utils import make_target_masks, target_cells

MOVES = {
    "up": (-1, 0),
    "down": (1, 0),
    "left": (0, -1),
    "right": (0, 1),
}


@dataclass(frozen=True)
class FaceGrid:
    """
    Grid navigation over a face image, described as a finite state graph.

    Each cell is a state. Moves that would leave the board are not legal.
    Target cells (eyes / nose) are terminal: arriving there pays goal_reward,
    every other arrival costs step_cost.
    """
    grid_size: int
    target_cells: frozenset
    step_cost: float = 0.01
    goal_reward: float = 1.0

    def __post_init__(self):
        if not self.target_cells:
            raise ValueError("FaceGrid needs at least one target cell.")
        for r, c in self.target_cells:
            if not (0 <= r < self.grid_size and 0 <= c < self.grid_size):
                raise ValueError(f"Target cell {(r, c)} is outside a {self.grid_size}x{self.grid_size} grid.")

    @classmethod
    def from_image(cls, image, grid_size=16, targets=("eyes", "nose"), **kwargs):
        # The masks only depend on the layout heuristics, the image just has to be large enough.
        H, W = image.shape[:2]
        if grid_size > min(H, W):
            raise ValueError(f"grid_size {grid_size} is larger than the {H}x{W} image.")
        return cls(grid_size, target_cells(make_target_masks(grid_size, targets)), **kwargs)

    @property
    def num_cells(self):
        return self.grid_size * self.grid_size

    def state_at(self, row, col):
        if not (0 <= row < self.grid_size and 0 <= col < self.grid_size):
            raise ValueError(f"Cell {(row, col)} is outside a {self.grid_size}x{self.grid_size} grid.")
        return FaceGridState(row, col, self)

    def random_start(self, rng):
        """Uniformly random non-target cell."""
        if len(self.target_cells) >= self.num_cells:
            raise ValueError("Every cell is a target; there is no start cell.")
        while True:
            r, c = (int(v) for v in rng.integers(0, self.grid_size, size=2))
            if (r, c) not in self.target_cells:
                return FaceGridState(r, c, self)


@dataclass(frozen=True)
class FaceGridState:
    row: int
    col: int
    grid: FaceGrid = field(compare=False, repr=False)

    @property
    def cell(self):
        return (self.row, self.col)

    @property
    def is_target(self):
        return self.cell in self.grid.target_cells

    def legal_actions(self):
        if self.is_target:
            return []
        n = self.grid.grid_size
        return [name for name, (dr, dc) in MOVES.items()
                if 0 <= self.row + dr < n and 0 <= self.col + dc < n]

    def make_transition(self, action):
        dr, dc = MOVES[action]
        return FaceGridState(self.row + dr, self.col + dc, self.grid)

    @property
    def reward_for_last_move(self):
        return self.grid.goal_reward if self.is_target else -self.grid.step_cost

    def select_best_action(self, actions, rng):
        return select_best_action(actions, rng)

    def __str__(self):
        return f"({self.row},{self.col})"
