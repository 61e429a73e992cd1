"""CLI tool for deciding finite-set sequents."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import z3

from setdec.fset.certificate import verify_certificate
from setdec.fset.config import SETDEC_DEBUG, DecideConfig
from setdec.fset.decidability import default_table
from setdec.fset.decide import decide
from setdec.fset.parser import parse_problem
from setdec.fset.z3_bridge import prove_with_z3
from setdec.utils.exceptions import SetDecError


def _format_crosscheck(result: Optional[bool]) -> str:
    if result is True:
        return "valid"
    if result is False:
        return "invalid"
    return "unknown"


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the fsetdec CLI."""
    parser = argparse.ArgumentParser(
        description="Decide entailments over finite sets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("file", type=str, help="Problem file")
    parser.add_argument(
        "--no-pull",
        action="store_true",
        help="Do not pull negations outwards during normalization",
    )
    parser.add_argument(
        "--max-splits",
        type=int,
        help="Case-split budget of the closure search (default: unbounded)",
    )
    parser.add_argument(
        "--decidable",
        action="append",
        default=[],
        metavar="NAME",
        help="Declare predicate NAME decidable (repeatable)",
    )
    parser.add_argument(
        "--certificate",
        action="store_true",
        help="Print the certificate of a proved problem",
    )
    parser.add_argument(
        "--crosscheck",
        action="store_true",
        help="Also check the problem with z3",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=5,
        help="Timeout in seconds for the z3 cross-check (default: 5)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="DEBUG" if SETDEC_DEBUG else "WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    args = parser.parse_args(argv)
    if not Path(args.file).exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        hypotheses, goal = parse_problem(Path(args.file).read_text())
        table = default_table()
        for name in args.decidable:
            table.register_predicate(name)
        config = DecideConfig(
            decidability=table,
            use_pull=not args.no_pull,
            max_splits=args.max_splits,
        )
        result = decide(hypotheses, goal, config)

        print(result.verdict.value)
        for diagnostic in result.diagnostics:
            logging.info("%s", diagnostic)
        if result.open_branch is not None:
            logging.info("Open branch: %s", result.open_branch)
        if args.certificate and result.certificate is not None:
            print(result.certificate.render())
            errors = verify_certificate(result.certificate)
            for error in errors:
                print(f"Certificate error: {error}", file=sys.stderr)
        if args.crosscheck:
            check = prove_with_z3(hypotheses, goal, args.timeout * 1000)
            print(f"z3: {_format_crosscheck(check)}")
            if result.proved and check is False:
                logging.error("z3 refutes a proved problem")
        return 0
    except (SetDecError, OSError, z3.Z3Exception) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if args.log_level == "DEBUG":
            import traceback

            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
