"""Run-level configuration for training on the face grid."""

from dataclasses import dataclass

from .q_table import DEFAULT_EPS


@dataclass
class TrainConfig:
    seed: int = 0
    grid_size: int = 16
    targets: tuple = ("eyes", "nose")
    resize: int = 256  # square side the input image is resized to
    step_cost: float = 0.01
    goal_reward: float = 1.0
    episodes: int = 2000
    max_steps: int = 200
    learning_rate: float = 0.2
    discount: float = 0.99
    epsilon: float = DEFAULT_EPS  # base rate; exploration decays towards it
    out_dir: str = "out"
