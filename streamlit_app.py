"""
Streamlit frontend for the tabular Q-table face-grid demo.

Run from the project root:
    pip install -e .[app]
    streamlit run streamlit_app.py

Features:
- Choose the synthetic sample face, an uploaded image, or a camera snapshot
- Configure grid size, targets and learning hyperparameters
- Train with a live return chart and progress bar
- Inspect the learned values as a heat-map
- Run a greedy rollout and overlay the path on the image
"""

import numpy as np
from PIL import Image
import streamlit as st

from rl_qtable.config import TrainConfig
from rl_qtable.utils import synthetic_face, gridify, to_grayscale_array
from rl_qtable.env import FaceGrid
from rl_qtable.q_table import QTable
from rl_qtable.q_learning import QLearner, greedy_rollout
from rl_qtable.viz import plot_learning_curve, plot_value_grid, plot_path_over_image


@st.cache_data
def load_image_for_app(raw, mode, size, resize=256):
    # keyed on the pixel bytes so a new upload or snapshot is never served a stale array
    return to_grayscale_array(Image.frombytes(mode, size, raw), (resize, resize))


defaults = TrainConfig()

# Sidebar controls
st.sidebar.title("Q-table Face Grid")
mode = st.sidebar.radio("Image source:", ["Sample image", "Upload image", "Live camera"])
grid_size = st.sidebar.slider("Grid size:", min_value=8, max_value=32, value=defaults.grid_size, step=1)
targets = st.sidebar.multiselect("Targets:", options=["eyes", "nose"], default=list(defaults.targets))

st.sidebar.markdown("---")
episodes = st.sidebar.number_input("Episodes:", min_value=10, max_value=50000, value=defaults.episodes, step=10)
max_steps = st.sidebar.number_input("Max steps per episode:", min_value=10, max_value=2000, value=defaults.max_steps)
learning_rate = st.sidebar.number_input("Learning rate:", min_value=0.001, max_value=1.0,
                                        value=defaults.learning_rate, step=0.01, format="%.3f")
discount = st.sidebar.number_input("Discount:", min_value=0.0, max_value=1.0,
                                   value=defaults.discount, step=0.01, format="%.3f")
epsilon = st.sidebar.number_input("Base epsilon:", min_value=0.0, max_value=1.0,
                                  value=defaults.epsilon, step=0.01, format="%.3f")
step_cost = st.sidebar.number_input("Step cost:", min_value=0.0, max_value=1.0,
                                    value=defaults.step_cost, step=0.001, format="%.3f")
seed = st.sidebar.number_input("Seed:", min_value=0, value=defaults.seed, step=1)

st.title("Reinforcement Learning — Q-table Face Grid")
st.markdown("Trains a tabular Q-table to navigate a grid over a face image towards the eyes or nose.")

image_pil = None
if mode == "Sample image":
    image_pil = Image.fromarray((synthetic_face(defaults.resize) * 255).astype(np.uint8))
elif mode == "Upload image":
    uploaded = st.file_uploader("Upload an image (png/jpg)")
    if uploaded is not None:
        image_pil = Image.open(uploaded)
elif mode == "Live camera":
    camera_img = st.camera_input("Take a picture")
    if camera_img is not None:
        image_pil = Image.open(camera_img)

if image_pil is None:
    st.info("No image selected yet. Pick a source on the left.")
    st.stop()
if not targets:
    st.warning("Pick at least one target.")
    st.stop()

st.subheader("Input image")
st.image(image_pil, use_container_width=True)
rgb = image_pil.convert("RGB")
img_arr = load_image_for_app(rgb.tobytes(), rgb.mode, rgb.size, resize=defaults.resize)

try:
    grid = FaceGrid.from_image(img_arr, grid_size=grid_size, targets=tuple(targets), step_cost=float(step_cost))
except ValueError as ex:
    st.error(str(ex))
    st.stop()

col1, col2 = st.columns(2)
with col1:
    train_button = st.button("Start training")
with col2:
    eval_button = st.button("Greedy evaluate (visualize path)")

if train_button:
    rng = np.random.default_rng(int(seed))
    table = QTable(grid.random_start(rng), epsilon=float(epsilon), rng=rng)
    learner = QLearner(table, learning_rate=float(learning_rate),
                       future_reward_discount=float(discount), max_steps=int(max_steps))
    st.write(f"Built {table}")

    progress_bar = st.progress(0)
    status = st.empty()
    chart = st.line_chart()
    report_every = max(1, int(episodes) // 10)

    def report(ep, total_r):
        chart.add_rows(np.array([total_r]))
        progress_bar.progress(ep / int(episodes))
        if ep % report_every == 0:
            status.text(f"Episode {ep}/{episodes}  Return={total_r:.3f}  "
                        f"Explore={table.exploration_probability(ep):.3f}")

    returns = learner.learn(int(episodes), start_states=grid.random_start, callback=report)
    st.session_state["table"] = table
    st.success("Training finished")
    st.pyplot(plot_learning_curve(returns, window=max(10, int(episodes) // 20)))
    st.pyplot(plot_value_grid(table, grid))

if eval_button:
    table = st.session_state.get("table")
    if table is None:
        st.error("No Q-table available. Train first.")
        st.stop()
    try:
        path = greedy_rollout(table, grid.random_start(table.rng), max_steps=10 * grid_size)
    except KeyError as ex:
        st.error(f"The trained table does not match the current grid settings: {ex}")
        st.stop()
    overlay = plot_path_over_image(img_arr, gridify(img_arr, grid_size), [s.cell for s in path],
                                   targets=grid.target_cells)
    st.subheader("Greedy rollout visualization")
    st.image(overlay)
    st.write(f"Start cell: {path[0]}, end cell: {path[-1]}, steps={len(path) - 1}")
