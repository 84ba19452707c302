

from __future__ import annotations

import argparse
import logging

import gymnasium as gym

import falling_blocks.env  # noqa: F401


log = logging.getLogger(__name__)


def run_random(steps: int = 200, seed: int | None = None) -> float:
    env = gym.make("FallingBlocks-10x20-v0")
    obs, info = env.reset(seed=seed)
    env.action_space.seed(seed)
    total_reward = 0.0
    episodes = 0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            episodes += 1
            log.info("episode %d ended with score %d", episodes, info["score"])
            obs, info = env.reset()
    env.close()
    return total_reward


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    args = p.parse_args()
    logging.basicConfig(level=logging.INFO)
    total_reward = run_random(args.steps, args.seed)
    print(f"Random agent total reward: {total_reward:.2f}")


if __name__ == "__main__":  # pragma: no cover
    main()
