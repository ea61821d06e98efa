# src/primetree/cli.py

"""
primetree - prime factorizations as trees

Description:
    Factorizes each integer given on the command line against a cached,
    sieve-generated list of primes and prints the factorization together
    with its tree encoding.

usage: primetree [-h] [-p PATH] [-b BOUND] [--trim | --no-trim]
                 [--profile NAME] [--output FILE] [--quiet] [--debug]
                 [numbers ...]
"""

from __future__ import annotations

import argparse
import faulthandler
import sys
import textwrap
import traceback
from time import perf_counter

from colorama import Fore, Style
from colorama import init as colorama_init

from primetree import __version__ as _ver
from primetree import runtime
from primetree.config import has_profile, list_all_profiles, load_settings
from primetree.fmt import format_duration, format_factorization, label
from primetree.output_manager import OutputManager
from primetree.primes import PrimeTable
from primetree.runtime import APPLY, CFG, debug
from primetree.runtime import current as _rt_current
from primetree.tree import FactorTree
from primetree.utility import (
    PrimeTreeError,
    UserInputError,
    flatten_dotted,
    parse_number,
    typename,
)
from primetree.workspace import ensure_workspace_seeded, workspace_dir

DEFAULT_CACHE_PATH = "primes.cache"
DEFAULT_BOUND = 1_000_000


def _install_loud_error_handlers(debug_on: bool) -> None:
    if not debug_on:
        return
    # Always show full Python tracebacks
    try:
        faulthandler.enable()
    except (OSError, ValueError):
        # stderr without a file descriptor (captured / redirected in-process)
        pass

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if not (msg.startswith("Invalid input:") or msg.startswith("Error:")):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _word_arg(s: str) -> int:
    try:
        return parse_number(s)
    except UserInputError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent(f"""\
    tree form:
      Every non-leaf node prints three lines, s (exponent), l (next factor)
      and o (prime index gap), each followed by its subtree one level deeper.
      A leaf prints as '*'.

    profiles:
      Settings are read from <workspace>/profiles/<name>.toml ('default' if
      present). Command-line options override the profile.
      Workspace: $PRIMETREE_HOME or ~/.primetree

    defaults:
      --primes-cache-path {DEFAULT_CACHE_PATH}   --bound {DEFAULT_BOUND:_}
    """)

    p = argparse.ArgumentParser(
        prog="primetree",
        description="Prime factorizations and their tree encoding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("numbers", nargs="*", metavar="number",
                   help="non-negative integers (< 2**64) to factorize and encode")
    p.add_argument("-p", "--primes-cache-path", default=None, metavar="PATH",
                   help="file holding the cached primes")
    p.add_argument("-b", "--bound", type=_word_arg, default=None,
                   help="minimum number of primes the cache must hold (regenerated if smaller)")
    p.add_argument("--trim", action=argparse.BooleanOptionalAction, default=None,
                   help="omit redundant exponent-1 leaves (0 and 1 become unrepresentable)")
    p.add_argument("--profile", default=None, metavar="NAME", help="settings profile to load")
    p.add_argument("--output", default=None, help="Append results to a file (also prints unless --quiet)")
    p.add_argument("--quiet", action="store_true", help="Suppress screen output")
    p.add_argument("--debug", action="store_true", help="Show timings, settings and full tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    runtime.reset()
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except PrimeTreeError as e:
        if _rt_current().debug:
            raise
        _print_user_error(str(e))
        return 1
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        if _rt_current().debug:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _apply_profile(explicit: str | None) -> None:
    """
    Precedence:
      1) explicit --profile (must exist)
      2) 'default' if present in the workspace
      3) built-in defaults
    """
    try:
        ensure_workspace_seeded()
    except OSError as e:
        debug(f"workspace {workspace_dir()} not seeded: {e}")

    if explicit and not has_profile(explicit):
        available = ", ".join(list_all_profiles()) or "(none)"
        raise UserInputError(f"Unknown profile: '{explicit}'. Available profiles: {available}")

    name = explicit or "default"
    if not has_profile(name):
        debug("no default profile; using built-in settings")
        return

    selected = load_settings(name)
    APPLY(selected)

    debug(f"active profile: {selected.name} ({selected._source})")
    for k, v in sorted(flatten_dotted(selected.as_dict()).items(), key=lambda kv: kv[0].lower()):
        debug(f"    {k:.<40} {v!r} ({typename(v)})")


# ---- main ----
def _main_impl(argv=None) -> int:

    colorama_init(autoreset=True)

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)

    _install_loud_error_handlers(args.debug)

    numbers = [parse_number(tok) for tok in args.numbers]

    _apply_profile(args.profile)

    bound = args.bound if args.bound is not None else int(CFG("CACHE.BOUND", DEFAULT_BOUND))
    cache_path = args.primes_cache_path or CFG("CACHE.PATH", DEFAULT_CACHE_PATH)
    trim = args.trim if args.trim is not None else bool(CFG("TREE.TRIM", False))
    output = args.output if args.output is not None else (CFG("OUTPUT.OUTPUT_FILE", None) or None)

    t0 = perf_counter()
    table = PrimeTable.try_new(bound, cache_path)
    debug(f"prime table ready in {format_duration(perf_counter() - t0)}: {table!r}")

    om = OutputManager(output_file=output, quiet=args.quiet)
    try:
        om.write(f"Specified bound: {bound}. Extent of cache file ({cache_path}): {table.extent()}.")

        tree = FactorTree(table, trimming_enabled=trim)
        for n in numbers:
            t1 = perf_counter()
            factors = table.prime_factors(n)
            tree.fill_with_num(n)

            om.write()
            om.write(f"{label('Prime factors:')} {format_factorization(factors)}")
            om.write(f"{label('Tree form:')} {tree}")
            om.write()
            debug(f"{n}: {len(tree)} node(s) in {format_duration(perf_counter() - t1)}")
    finally:
        om.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
