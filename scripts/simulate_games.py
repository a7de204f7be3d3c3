"""simulate_games.py
Play many unattended games between the computer and the 'random' oracle and compare the
observed user win rate for each (user die, computer die) pairing against the probability matrix.

Every protocol round is still run in full (commit, collect, reveal, combine) and verified, so this
also serves as a smoke test of the protocol under load.

Usage: python scripts/simulate_games.py 2,2,4,4,9,9 1,1,6,6,8,8 3,3,5,5,7,7 --games 2000
"""
import argparse
import logging
from collections import defaultdict
from typing import Dict, List, Tuple

from tabulate import tabulate

from fair_dice.core.config import GameConfig
from fair_dice.core.dice import parse_dice
from fair_dice.core.engine import GameEngine, USER
from fair_dice.core.probability import compute_matrix
from fair_dice.oracles import choose_oracle
from fair_dice.persistence.recorder import InMemoryRecorder

logger = logging.getLogger("simulate_games")


def run_games(dice, games: int, seed=None) -> Tuple[Dict[Tuple[int, int], List[int]], int]:
    """
    Play `games` games.
    Returns:
        tuple: ({(user_die, computer_die): [user_wins, plays]}, rounds_verified)
    """
    cfg = GameConfig(rng_seed=seed)
    oracle = choose_oracle("random", seed=seed)
    stats: Dict[Tuple[int, int], List[int]] = defaultdict(lambda: [0, 0])
    verified = 0
    for game_index in range(games):
        engine = GameEngine(dice, oracle, config=cfg)
        recorder = InMemoryRecorder(game_id=str(game_index))
        engine.subscribe(recorder)
        state = engine.play()
        verified += sum(1 for e in recorder.of_type("CommitmentChecked") if e.payload["ok"])
        pair = (state.user_die, state.computer_die)
        stats[pair][1] += 1
        if state.winner == USER:
            stats[pair][0] += 1
    return stats, verified


def main():
    parser = argparse.ArgumentParser(description="Simulate fair dice games with an automated user.")
    parser.add_argument("dice", nargs="+")
    parser.add_argument("--games", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    dice = parse_dice(args.dice)
    stats, verified = run_games(dice, args.games, seed=args.seed)
    matrix = compute_matrix(dice)
    logger.info("played %d games, %d protocol rounds verified", args.games, verified)

    rows = []
    for (u, c), (wins, plays) in sorted(stats.items()):
        rows.append([str(dice[u]), str(dice[c]), plays, f"{wins / plays:.4f}", f"{float(matrix.get(u, c)):.4f}"])
    print(tabulate(rows, headers=["User die", "Computer die", "Games", "Observed", "Expected"], tablefmt="grid"))


if __name__ == "__main__":
    main()
