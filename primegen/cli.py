# primegen/cli.py
# Command line front end: one JSON object per result on stdout, logs on stderr

from __future__ import annotations
import argparse
import json
import logging
import sys
import time
from typing import List, Optional

from .config import LOG_LEVELS, Settings, load_config
from .errors import PrimeGenError
from .generators import bbs_generate, lcg_next
from .primality import is_probable_prime, is_probable_prime_fermat, is_probable_prime_fermat_parallel
from .search import TEST_KINDS, generate_prime
from .streams import now_millis

log = logging.getLogger(__name__)

def _emit(payload: dict) -> None:
    print(json.dumps(payload), flush=True)

def _elapsed_ms(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000, 3)

# ---------- Commands ----------

def cmd_prime(args, settings: Settings) -> int:
    seed = args.seed if args.seed is not None else now_millis()
    rounds = args.rounds if args.rounds is not None else settings.rounds
    workers = args.workers if args.workers is not None else settings.workers
    max_iterations = settings.max_iterations if args.max_iterations is None else (args.max_iterations or None)
    t0 = time.perf_counter()
    p = generate_prime(args.bits, rounds, seed, args.test, thread_count=workers, max_iterations=max_iterations)
    _emit({"bits": args.bits, "rounds": rounds, "test": args.test, "seed": str(seed),
           "prime": str(p), "ms": _elapsed_ms(t0)})
    return 0

def cmd_isprime(args, settings: Settings) -> int:
    rounds = args.rounds if args.rounds is not None else settings.rounds
    workers = args.workers if args.workers is not None else settings.workers
    for n in args.N:
        t0 = time.perf_counter()
        if args.test == "miller":
            verdict = is_probable_prime(n, rounds)
        elif args.test == "fermat":
            verdict = is_probable_prime_fermat(n, rounds)
        else:
            verdict = is_probable_prime_fermat_parallel(n, rounds, workers)
        _emit({"n": str(n), "probable_prime": verdict, "test": args.test, "rounds": rounds,
               "ms": _elapsed_ms(t0)})
    return 0

def cmd_bbs(args, settings: Settings) -> int:
    t0 = time.perf_counter()
    value = bbs_generate(args.p, args.q, args.seed, args.bits)
    _emit({"bits": args.bits, "value": str(value), "ms": _elapsed_ms(t0)})
    return 0

def cmd_lcg(args, settings: Settings) -> int:
    value = args.seed
    values = []
    for _ in range(args.count):
        value = lcg_next(args.modulus, args.multiplier, args.increment, value)
        values.append(str(value))
    _emit({"modulus": str(args.modulus), "values": values})
    return 0

# ---------- Parser ----------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="primegen", description="LCG/BBS generators and probable-prime search")
    ap.add_argument("--log-level", choices=LOG_LEVELS, default=None, help="override PRIMEGEN_LOG_LEVEL")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("prime", help="search a probable prime of exactly --bits bits")
    p.add_argument("--bits", type=int, required=True)
    p.add_argument("--rounds", type=int, default=None, help="primality rounds (default PRIMEGEN_ROUNDS)")
    p.add_argument("--test", choices=TEST_KINDS, default="miller")
    p.add_argument("--workers", type=int, default=None, help="threads for fermat-parallel")
    p.add_argument("--seed", type=int, default=None, help="defaults to the current time in ms")
    p.add_argument("--max-iterations", type=int, default=None, help="candidate budget, 0 = unbounded")
    p.set_defaults(func=cmd_prime)

    p = sub.add_parser("isprime", help="run a primality test on each N")
    p.add_argument("N", nargs="+", type=int)
    p.add_argument("--rounds", type=int, default=None)
    p.add_argument("--test", choices=TEST_KINDS, default="miller")
    p.add_argument("--workers", type=int, default=None)
    p.set_defaults(func=cmd_isprime)

    p = sub.add_parser("bbs", help="Blum-Blum-Shub number")
    p.add_argument("--p", type=int, required=True)
    p.add_argument("--q", type=int, required=True)
    p.add_argument("--seed", type=int, required=True)
    p.add_argument("--bits", type=int, required=True)
    p.set_defaults(func=cmd_bbs)

    p = sub.add_parser("lcg", help="step a linear congruential generator")
    p.add_argument("--modulus", type=int, required=True)
    p.add_argument("--multiplier", type=int, required=True)
    p.add_argument("--increment", type=int, required=True)
    p.add_argument("--seed", type=int, required=True)
    p.add_argument("--count", type=int, default=1)
    p.set_defaults(func=cmd_lcg)
    return ap

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_config()
    except ValueError as e:
        print(f"primegen: {e}", file=sys.stderr)
        return 2
    logging.basicConfig(level=args.log_level or settings.log_level, stream=sys.stderr,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args, settings)
    except (PrimeGenError, ValueError) as e:
        log.debug("command %s failed", args.command, exc_info=True)
        print(f"primegen: {e}", file=sys.stderr)
        return 2

if __name__ == "__main__":
    raise SystemExit(main())
