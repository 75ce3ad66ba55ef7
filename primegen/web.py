# primegen/web.py
# Small JSON API over the generators and the prime search
#   GET  /api/health
#   GET  /api/prime?bits=256&rounds=10&test=miller&workers=4&seed=123
#   GET  /api/isprime?n=97&rounds=10&test=fermat&seed=42
#   POST /api/bbs  {"p": ..., "q": ..., "seed": ..., "bits": ...}

from __future__ import annotations
import logging
import time
from typing import Optional

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from .config import Settings, load_config
from .errors import NotCoPrime, SearchExhausted
from .generators import bbs_generate
from .primality import is_probable_prime, is_probable_prime_fermat, is_probable_prime_fermat_parallel
from .search import TEST_KINDS, generate_prime
from .streams import now_millis

log = logging.getLogger(__name__)

def _settings() -> Settings:
    return current_app.config["PRIMEGEN"]

def _parse_int(raw, name: str, minimum: Optional[int] = None, maximum: Optional[int] = None) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        raise BadRequest(f"{name} must be integer")
    if minimum is not None and value < minimum:
        raise BadRequest(f"{name} must be >= {minimum}")
    if maximum is not None and value > maximum:
        raise BadRequest(f"{name} must be <= {maximum}")
    return value

def _arg_int(name: str, default: Optional[int] = None, minimum: Optional[int] = None,
             maximum: Optional[int] = None) -> int:
    raw = request.args.get(name, "").strip()
    if not raw:
        if default is None:
            raise BadRequest(f"missing {name}")
        return default
    return _parse_int(raw, name, minimum, maximum)

def _arg_test() -> str:
    test = request.args.get("test", "miller").strip()
    if test not in TEST_KINDS:
        raise BadRequest(f"test must be one of {', '.join(TEST_KINDS)}")
    return test

def _check_bits(bits: int, name: str = "bits") -> None:
    limit = _settings().max_bits
    if bits > limit:
        raise BadRequest(f"{name} must be <= {limit}")

# ---------- Routes ----------

def api_health():
    return jsonify(ok=True)

def api_prime():
    s = _settings()
    bits = _arg_int("bits", minimum=2)
    _check_bits(bits)
    rounds = _arg_int("rounds", min(s.rounds, s.max_rounds), minimum=0, maximum=s.max_rounds)
    test = _arg_test()
    workers = _arg_int("workers", min(s.workers, s.max_workers), minimum=1, maximum=s.max_workers)
    seed = _arg_int("seed", now_millis(), minimum=0)
    t0 = time.perf_counter()
    p = generate_prime(bits, rounds, seed, test, thread_count=workers, max_iterations=s.max_iterations)
    ms = int((time.perf_counter() - t0) * 1000)
    return jsonify(ok=True, prime=str(p), bits=bits, rounds=rounds, test=test, seed=str(seed), duration_ms=ms)

def api_isprime():
    s = _settings()
    n = _arg_int("n", minimum=0)
    _check_bits(n.bit_length(), "n bit length")
    rounds = _arg_int("rounds", min(s.rounds, s.max_rounds), minimum=0, maximum=s.max_rounds)
    test = _arg_test()
    workers = _arg_int("workers", min(s.workers, s.max_workers), minimum=1, maximum=s.max_workers)
    # fermat only, defaults to the clock
    seed = _arg_int("seed", now_millis(), minimum=0)
    if test == "miller":
        verdict = is_probable_prime(n, rounds)
    elif test == "fermat":
        verdict = is_probable_prime_fermat(n, rounds, seed=seed)
    else:
        verdict = is_probable_prime_fermat_parallel(n, rounds, workers, seed=seed)
    return jsonify(ok=True, n=str(n), probable_prime=verdict, rounds=rounds, test=test)

def api_bbs():
    try:
        data = request.get_json(force=True, silent=False) or {}
    except BadRequest:
        raise BadRequest("Invalid payload: expected JSON object")
    if not isinstance(data, dict):
        raise BadRequest("Invalid payload: expected JSON object")
    p = _parse_int(data.get("p"), "p", minimum=1)
    q = _parse_int(data.get("q"), "q", minimum=1)
    seed = _parse_int(data.get("seed"), "seed", minimum=0)
    bits = _parse_int(data.get("bits"), "bits", minimum=0)
    _check_bits(bits)
    value = bbs_generate(p, q, seed, bits)
    return jsonify(ok=True, value=str(value), bits=bits)

# ---------- Error mapping ----------

def _bad_request(e: BadRequest):
    return jsonify(ok=False, error=e.description), 400

def _not_coprime(e: NotCoPrime):
    return jsonify(ok=False, error=str(e), value=str(e.value), factor=str(e.factor)), 400

def _exhausted(e: SearchExhausted):
    log.warning("prime search exhausted: %s", e)
    return jsonify(ok=False, error=str(e)), 503

def create_app(settings: Optional[Settings] = None) -> Flask:
    app = Flask(__name__)
    app.config["PRIMEGEN"] = settings or load_config()
    app.add_url_rule("/api/health", view_func=api_health, methods=["GET"])
    app.add_url_rule("/api/prime", view_func=api_prime, methods=["GET"])
    app.add_url_rule("/api/isprime", view_func=api_isprime, methods=["GET"])
    app.add_url_rule("/api/bbs", view_func=api_bbs, methods=["POST"])
    app.register_error_handler(BadRequest, _bad_request)
    app.register_error_handler(NotCoPrime, _not_coprime)
    app.register_error_handler(SearchExhausted, _exhausted)
    return app

if __name__ == "__main__":
    settings = load_config()
    logging.basicConfig(level=settings.log_level)
    create_app(settings).run(host=settings.host, port=settings.port)
