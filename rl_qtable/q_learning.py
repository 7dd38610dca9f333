class QLearner:
    """
    Drives episodes against a QTable: pick an action, move, update, repeat until a terminal state.
    Episode numbers start at 1 and feed the table's exploration decay.
    """

    def __init__(self, table, learning_rate=0.2, future_reward_discount=0.99, max_steps=200):
        if max_steps < 1:
            raise ValueError(f"max_steps must be positive, got {max_steps}.")
        self.table = table
        self.learning_rate = learning_rate
        self.future_reward_discount = future_reward_discount
        self.max_steps = max_steps

    def run_episode(self, start_state, episode_number):
        """Play one episode from start_state and return the sum of rewards collected."""
        state = start_state
        total_r = 0.0
        for _ in range(self.max_steps):
            if not self.table.get_actions(state):
                break
            action = self.table.get_next_action(state, episode_number)
            next_state = state.make_transition(action[0])
            self.table.update(state, action, next_state,
                              self.learning_rate, self.future_reward_discount)
            total_r += next_state.reward_for_last_move
            state = next_state
        return total_r

    def learn(self, num_episodes, start_states=None, callback=None):
        """
        Run num_episodes episodes and return their returns.

        start_states: callable(rng) -> State picking each episode's start; defaults to
        the table's initial state. callback(episode_number, episode_return) is called
        after every episode.
        """
        returns = []
        for ep in range(1, num_episodes + 1):
            if start_states is None:
                start = self.table.initial_state
            else:
                start = start_states(self.table.rng)
            total_r = self.run_episode(start, ep)
            returns.append(total_r)
            if callback is not None:
                callback(ep, total_r)
        return returns


def greedy_rollout(table, start_state, max_steps=500):
    """Follow the best known action from start_state. Returns the visited states, start included."""
    path = [start_state]
    state = start_state
    while len(path) <= max_steps and table.get_actions(state):
        action, _ = table.get_best_move(state)
        state = state.make_transition(action)
        path.append(state)
    return path
