#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
import time

# Allow running this script directly via `python scripts/perft.py`
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from chessai.engine.board import STARTPOS_FEN, Board
from chessai.engine.perft import divide, perft


def main() -> None:
    parser = argparse.ArgumentParser(description="Count leaf nodes of the legal move tree")
    parser.add_argument("--fen", default=STARTPOS_FEN, help="FEN string (default: startpos)")
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument("--divide", action="store_true", help="Print counts per root move")
    args = parser.parse_args()

    board = Board.from_fen(args.fen)
    start = time.perf_counter()
    if args.divide and args.depth > 0:
        counts = divide(board, args.depth)
        for uci, count in sorted(counts.items()):
            print(f"{uci}: {count}")
        nodes = sum(counts.values())
    else:
        nodes = perft(board, args.depth)
    dt = time.perf_counter() - start
    nps = int(nodes / max(dt, 1e-9))
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt * 1000)} nps={nps}")


if __name__ == "__main__":
    main()
