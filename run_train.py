import os
import argparse
from dataclasses import fields

import numpy as np
import matplotlib.pyplot as plt
from rl_qtable.config import TrainConfig
from rl_qtable.utils import load_image_grayscale, synthetic_face, gridify
from rl_qtable.env import FaceGrid
from rl_qtable.q_table import QTable
from rl_qtable.q_learning import QLearner, greedy_rollout
from rl_qtable.viz import plot_learning_curve, plot_value_grid, plot_path_over_image


def parse_args(argv=None):
    d = TrainConfig()
    parser = argparse.ArgumentParser(description="Train a tabular Q-learning agent to find facial parts on a grid.")
    parser.add_argument("--image", type=str, default=None, help="Path to face image; a synthetic face is used if omitted.")
    parser.add_argument("--grid-size", type=int, default=d.grid_size)
    parser.add_argument("--targets", nargs="+", default=list(d.targets), choices=["eyes", "nose"])
    parser.add_argument("--episodes", type=int, default=d.episodes)
    parser.add_argument("--max-steps", type=int, default=d.max_steps)
    parser.add_argument("--learning-rate", type=float, default=d.learning_rate)
    parser.add_argument("--discount", type=float, default=d.discount)
    parser.add_argument("--epsilon", type=float, default=d.epsilon, help="Base exploration rate.")
    parser.add_argument("--step-cost", type=float, default=d.step_cost)
    parser.add_argument("--goal-reward", type=float, default=d.goal_reward)
    parser.add_argument("--resize", type=int, default=d.resize, help="Resize (square) for simplicity")
    parser.add_argument("--seed", type=int, default=d.seed)
    parser.add_argument("--out-dir", type=str, default=d.out_dir)
    args = parser.parse_args(argv)
    names = {f.name for f in fields(TrainConfig)}
    cfg = TrainConfig(**{k: v for k, v in vars(args).items() if k in names})
    cfg.targets = tuple(cfg.targets)
    return args.image, cfg


def main(argv=None):
    image_path, cfg = parse_args(argv)
    os.makedirs(cfg.out_dir, exist_ok=True)

    if image_path is None:
        img = synthetic_face(cfg.resize)
    else:
        img = load_image_grayscale(image_path, target_size=(cfg.resize, cfg.resize))
    grid = FaceGrid.from_image(img, grid_size=cfg.grid_size, targets=cfg.targets,
                               step_cost=cfg.step_cost, goal_reward=cfg.goal_reward)

    rng = np.random.default_rng(cfg.seed)
    start = grid.random_start(rng)
    table = QTable(start, epsilon=cfg.epsilon, rng=rng)
    print(f"Built {table} over a {grid.grid_size}x{grid.grid_size} grid with {len(grid.target_cells)} target cells")

    learner = QLearner(table, learning_rate=cfg.learning_rate,
                       future_reward_discount=cfg.discount, max_steps=cfg.max_steps)
    report_every = max(1, cfg.episodes // 10)

    def report(ep, total_r):
        if ep % report_every == 0:
            print(f"Episode {ep}/{cfg.episodes}  Return={total_r:.3f}  "
                  f"Explore={table.exploration_probability(ep):.3f}")

    episode_returns = learner.learn(cfg.episodes, start_states=grid.random_start, callback=report)

    print("Sample of learned entries:")
    print(table.get_first_n_entries_with_non0_actions(5))

    curve_path = os.path.join(cfg.out_dir, "learning_curve.png")
    plt.close(plot_learning_curve(episode_returns, window=max(10, cfg.episodes // 20), save_path=curve_path))
    print(f"Saved learning curve to: {curve_path}")

    values_path = os.path.join(cfg.out_dir, "value_grid.png")
    plt.close(plot_value_grid(table, grid, save_path=values_path))
    print(f"Saved value grid to: {values_path}")

    path = greedy_rollout(table, grid.random_start(rng), max_steps=10 * cfg.grid_size)
    path_img_path = os.path.join(cfg.out_dir, "greedy_path.png")
    plot_path_over_image(img, gridify(img, cfg.grid_size), [s.cell for s in path],
                         targets=grid.target_cells, save_path=path_img_path)
    print(f"Greedy rollout took {len(path) - 1} steps; saved render to: {path_img_path}")


if __name__ == "__main__":
    main()
