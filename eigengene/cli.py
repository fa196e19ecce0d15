#!/usr/bin/python3
# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Command-line front end.

    eigengene convert data.csv data.bin
    eigengene summarize data.bin.json --indices 1,2,5
    eigengene modules data.bin.json modules.csv -o eigengenes.csv
"""

import argparse
import json
import logging
import sys

import pandas as pd

from .backing import MemmapMatrix, save_matrix
from .config import METHODS, SummaryConfig
from .errors import EigengeneError, InputFormatError
from .summary import compute_subset_eigen_summary, summarize_modules

logger = logging.getLogger(__name__)


def parse_indices(text: str):
    """'1,2,5' or '3-6,9' -> [1, 2, 5] / [3, 4, 5, 6, 9]"""
    out = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part[1:]:
            lo, hi = part.split("-", 1)
            out.extend(range(int(lo), int(hi) + 1))
        else:
            out.append(int(part))
    if not out:
        raise argparse.ArgumentTypeError("no indices given")
    return out


def _config_from_args(args) -> SummaryConfig:
    return SummaryConfig(
        center=not args.no_center,
        scale=args.scale,
        method=args.method,
        allow_duplicates=args.allow_duplicates,
        on_degenerate="zero" if args.zero_on_degenerate else "raise",
    )


def cmd_convert(args) -> int:
    try:
        df = pd.read_csv(args.data, index_col=0 if args.index_col else None)
        df = df.apply(pd.to_numeric, errors="raise")
    except (ValueError, pd.errors.ParserError) as e:
        raise InputFormatError(f"{args.data} is not a numeric CSV: {e}") from e
    if df.empty:
        raise InputFormatError(f"{args.data} holds no data")
    descriptor = save_matrix(df.to_numpy(), args.output, dtype=args.dtype)
    print(descriptor)
    return 0


def cmd_summarize(args) -> int:
    matrix = MemmapMatrix.from_descriptor(args.descriptor)
    result = compute_subset_eigen_summary(matrix, args.indices, _config_from_args(args))
    print(
        json.dumps(
            {
                "variance_explained": result.variance_explained,
                "singular_value": result.singular_value,
                "method": result.method,
                "n_iter": result.n_iter,
                "eigenvector": result.eigenvector.tolist(),
            },
            indent=2,
        )
    )
    return 0


def cmd_modules(args) -> int:
    matrix = MemmapMatrix.from_descriptor(args.descriptor)
    try:
        labels = pd.read_csv(args.assignments)
    except (ValueError, pd.errors.ParserError) as e:
        raise InputFormatError(f"Cannot read {args.assignments}: {e}") from e
    missing = {"node", "module"} - set(labels.columns)
    if missing:
        raise InputFormatError(
            f"{args.assignments} needs columns 'node' and 'module', "
            f"missing: {', '.join(sorted(missing))}"
        )
    if not pd.api.types.is_integer_dtype(labels["node"]):
        raise InputFormatError(f"{args.assignments}: column 'node' must hold integers")
    assignments = {
        module: group["node"].to_numpy()
        for module, group in labels.groupby("module", sort=True)
    }
    summaries = summarize_modules(matrix, assignments, _config_from_args(args))

    table = pd.DataFrame(
        {str(s.module): s.eigenvector for s in summaries},
        index=pd.RangeIndex(1, matrix.n_rows + 1, name="sample"),
    )
    stats = pd.DataFrame(
        [
            (str(s.module), s.indices.size, s.variance_explained, s.coherence)
            for s in summaries
        ],
        columns=["module", "n_nodes", "variance_explained", "coherence"],
    )
    if args.output:
        table.to_csv(args.output)
        logger.info("Wrote %d eigengenes to %s", len(summaries), args.output)
    print(stats.to_string(index=False, float_format=lambda x: f"{x:.4f}"))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eigengene",
        description="Module eigengenes and variance explained for column subsets "
        "of a file-backed matrix.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    conv = sub.add_parser("convert", help="CSV -> column-major binary + descriptor")
    conv.add_argument("data", help="Numeric CSV, samples in rows")
    conv.add_argument("output", help="Path of the binary file to write")
    conv.add_argument("--dtype", default="float64", help="On-disk element type")
    conv.add_argument(
        "--index-col", action="store_true", help="First CSV column holds row names"
    )
    conv.set_defaults(func=cmd_convert)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("descriptor", help="JSON descriptor of the backing matrix")
    common.add_argument("--no-center", action="store_true", help="Decompose raw data")
    common.add_argument("--scale", action="store_true", help="Scale columns to unit variance")
    common.add_argument("--method", choices=METHODS, default="power")
    common.add_argument("--allow-duplicates", action="store_true")
    common.add_argument(
        "--zero-on-degenerate",
        action="store_true",
        help="Return a zero eigenvector instead of failing on constant subsets",
    )

    summ = sub.add_parser("summarize", parents=[common], help="Summarise one subset")
    summ.add_argument(
        "--indices", type=parse_indices, required=True, help="1-based, e.g. 1,2,5-9"
    )
    summ.set_defaults(func=cmd_summarize)

    mods = sub.add_parser("modules", parents=[common], help="Summarise every module")
    mods.add_argument("assignments", help="CSV with columns node,module")
    mods.add_argument("-o", "--output", help="CSV to write the eigengenes to")
    mods.set_defaults(func=cmd_modules)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (EigengeneError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
