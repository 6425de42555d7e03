"""
Command-line entry point for the subsequence machines.

Usage:
    tapemachine run -n 5 -m 3
    tapemachine verify abab aa
    tapemachine check aba#aba#aba --seed 11
    tapemachine -v check abba#aba
    tapemachine debug aba#aba --machine m3
"""

from __future__ import annotations

import argparse
import logging
import sys

from .machine import PreconditionError, seeded_choice
from .notation import orchestrator_tapes, render, verifier_tapes
from .orchestrator import Orchestrator
from .reference import verifier_steps
from .tape import StepCounter
from .verifier import Verifier

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure default logging if no handlers are present."""
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler()],
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_run(args) -> int:
    """M1 on ``#a^n#`` against ``a^m``, with the predicted step count."""
    if args.n < 1 or args.m < 1:
        raise PreconditionError("n and m must both be at least 1")
    counter = StepCounter()
    main, aux = verifier_tapes("a" * args.n, "a" * args.m, counter)
    machine = Verifier(main, aux)
    result = machine.run()
    print(f"Result: {str(result).lower()}")
    print(f"n={args.n}")
    print(f"m={args.m}")
    print(f"Steps: {counter.value}")
    print(f"Predicted steps: {verifier_steps(args.n, args.m)}")
    return 0


def cmd_verify(args) -> int:
    counter = StepCounter()
    main, aux = verifier_tapes(args.block, args.word, counter)
    machine = Verifier(main, aux)
    result = machine.run()
    output = machine.destroy()
    print(f"Result: {str(result).lower()}")
    print(f"Steps: {counter.value}")
    print(f"Main: {render(output.main_tape)}")
    print(f"Aux:  {render(output.aux_tape)}")
    return 0


def cmd_check(args) -> int:
    logger.debug("check %s seed=%s", args.text, args.seed)
    counter = StepCounter()
    main, aux = orchestrator_tapes(args.text)
    machine = Orchestrator(main, aux, counter=counter,
                           choose=seeded_choice(args.seed))
    result = machine.run()
    print(f"Result: {str(result).lower()}")
    print(f"Witness: {machine.substring}")
    print(f"Blocks verified: {machine.blocks_verified}")
    print(f"Steps: {counter.value}")
    return 0


def cmd_debug(args) -> int:
    from .debugger import build_machine, TapeDebugger

    machine, counter = build_machine(args.machine, args.text, word=args.word,
                                     seed=args.seed)
    TapeDebugger(machine, counter, auto_run=args.run).run()
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tapemachine",
        description="Composable Turing machines for a randomized subsequence check")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Trace every state transition")
    sub = parser.add_subparsers(dest="command", required=True)

    run_p = sub.add_parser("run", help="M1 on #a^n# against a^m, with step counts")
    run_p.add_argument("-n", type=int, required=True, help="Block length")
    run_p.add_argument("-m", type=int, required=True, help="Word length")
    run_p.set_defaults(func=cmd_run)

    verify_p = sub.add_parser("verify", help="Is WORD a subsequence of BLOCK? (M1)")
    verify_p.add_argument("block")
    verify_p.add_argument("word")
    verify_p.set_defaults(func=cmd_verify)

    check_p = sub.add_parser("check", help="One randomized common-subsequence check (M3)")
    check_p.add_argument("text", help="Blocks of a/b separated by #")
    check_p.add_argument("--seed", type=int, default=None,
                         help="Seed for the coin (default: unseeded)")
    check_p.set_defaults(func=cmd_check)

    debug_p = sub.add_parser("debug", help="Step a machine in the TUI debugger")
    debug_p.add_argument("text", help="Main tape input (a block for m1/m2)")
    debug_p.add_argument("--machine", choices=["m1", "m2", "m3"], default="m3")
    debug_p.add_argument("--word", default=None, help="Aux word for m1")
    debug_p.add_argument("--seed", type=int, default=None)
    debug_p.add_argument("--run", action="store_true", help="Run to the end on start")
    debug_p.set_defaults(func=cmd_debug)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        return args.func(args)
    except PreconditionError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
