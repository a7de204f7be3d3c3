import argparse
import logging
import sys
from typing import Dict, Optional, Sequence

from tabulate import tabulate

from fair_dice.core.config import GameConfig
from fair_dice.core.commitment import CommitmentMismatch
from fair_dice.core.dice import DiceValidationError, USAGE_EXAMPLE, parse_dice
from fair_dice.core.engine import GameEngine, COMPUTER, USER
from fair_dice.core.probability import ProbabilityMatrix
from fair_dice.core.sampler import EntropyFailure
from fair_dice.oracles import available_oracles, choose_oracle

# shown on the diagonal, where a die would face itself
DIAGONAL_PLACEHOLDER = ".3333"

HASH_CHOICES = ("sha3_256", "sha256", "sha3_512", "sha512", "blake2b")


def render_table(matrix: ProbabilityMatrix) -> str:
    """
    Render the win-probability matrix: rows are the user's die, columns the computer's die.
    Args:
        matrix (ProbabilityMatrix): Matrix from the engine.
    Returns:
        str: Grid table text.
    """
    headers = ["User dice v"] + [str(d) for d in matrix.dice]
    rows = []
    for i, d in enumerate(matrix.dice):
        cells = [DIAGONAL_PLACEHOLDER if p is None else f"{float(p):.4f}" for p in matrix.cells[i]]
        rows.append([str(d)] + cells)
    return tabulate(rows, headers=headers, tablefmt="grid", disable_numparse=True)


class ConsoleReporter:
    """
    Prints engine events as they happen. Passed to GameEngine.subscribe().
    """
    def __init__(self, output_fn=print):
        self.out = output_fn

    def __call__(self, event: Dict):
        handler = getattr(self, "on_" + event["type"], None)
        if handler is not None:
            handler(event)

    def on_FirstMoveStarted(self, event):
        self.out("Let's determine who makes the first move.")

    def on_Committed(self, event):
        self.out(f"I selected a random value in the range {event['low']}..{event['high']} (HMAC={event['digest']}).")

    def on_Revealed(self, event):
        self.out(f"My number is {event['computer_value']} (KEY={event['key']}).")

    def on_Resolved(self, event):
        self.out(f"The fair number generation result is {event['computer_value']} + {event['counterpart_value']}"
                 f" = {event['result']} (mod {event['modulus']}).")

    def on_CommitmentChecked(self, event):
        if not event["ok"]:
            self.out("WARNING: the revealed number does not match the announced HMAC. This round was not fair.")

    def on_FirstMoveDecided(self, event):
        if event["first"] == COMPUTER:
            self.out("I make the first move and choose the dice.")
        else:
            self.out("You make the first move and choose the dice.")

    def on_DieChosen(self, event):
        who = "I" if event["player"] == COMPUTER else "You"
        self.out(f"{who} choose the [{event['die']}] dice.")

    def on_RollStarted(self, event):
        self.out("It's time for my roll." if event["player"] == COMPUTER else "It's time for your roll.")

    def on_Rolled(self, event):
        who = "My" if event["player"] == COMPUTER else "Your"
        self.out(f"{who} roll result is {event['value']}.")

    def on_HelpRequested(self, event):
        self.out("\nProbability of the win for the user:")
        self.out(render_table(event["matrix"]) + "\n")

    def on_GameEnded(self, event):
        user, comp = event["user_value"], event["computer_value"]
        if event["winner"] == USER:
            self.out(f"You win ({user} > {comp})!")
        elif event["winner"] == COMPUTER:
            self.out(f"You lose ({comp} > {user})!")
        else:
            self.out(f"It's a tie ({user} = {comp})!")

    def on_GameAborted(self, event):
        self.out("Goodbye.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fair-dice",
        description="Play non-transitive dice against the computer with provably fair rolls.",
        epilog=f"Example: {USAGE_EXAMPLE}",
    )
    parser.add_argument("dice", nargs="*", help="one die per argument, six comma-separated integer faces")
    parser.add_argument("--oracle", default="console",
                        choices=available_oracles(selectable_only=True),
                        help="who answers on the user's side (default: console)")
    parser.add_argument("--seed", type=int, default=None, help="seed for the random oracle")
    parser.add_argument("--hash", default="sha3_256", choices=HASH_CHOICES, help="HMAC hash algorithm")
    parser.add_argument("--no-strict", action="store_true",
                        help="report commitment mismatches without stopping the game")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse arguments, play one game and return the process exit code.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    cfg = GameConfig(hash_name=args.hash, strict_verification=not args.no_strict, rng_seed=args.seed)
    try:
        dice = parse_dice(args.dice, min_dice=cfg.min_dice)
    except DiceValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"\nExample: {USAGE_EXAMPLE}")
        return 1

    if args.oracle == "random":
        oracle = choose_oracle("random", seed=cfg.rng_seed)
    else:
        oracle = choose_oracle(args.oracle)
    engine = GameEngine(dice, oracle, config=cfg)
    engine.subscribe(ConsoleReporter())
    try:
        engine.play()
    except EntropyFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except CommitmentMismatch as e:
        print(f"Integrity failure: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nExiting.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
