# cli.py: count 4D constellations in a line-delimited point file
from __future__ import annotations
import argparse
import sys

from .core4d import LINK_THRESHOLD, METHODS, Constellations, cluster_points_connected_components
from .reader import load_points, points_frame


def main(argv=None):
    ap = argparse.ArgumentParser(
        prog="constellations",
        description="Count groups of 4D points linked by Manhattan distance <= threshold."
    )

    ap.add_argument("input", nargs="?", default="-",
                    help="File with one 'x,y,z,t' point per line ('-' reads stdin).")
    ap.add_argument("--threshold", type=int, default=LINK_THRESHOLD,
                    help=f"Linking distance (Manhattan), default {LINK_THRESHOLD}.")
    ap.add_argument("--method", choices=list(METHODS), default="merge",
                    help="'merge' = pairwise merge until stable; 'union-find' = KD-tree pairs + union-find.")

    # -------- Optional exports --------
    ap.add_argument("--labels-out", default=None,
                    help="Write per-point constellation labels to this CSV.")
    ap.add_argument("--plot", default=None,
                    help="Write a pair plot (PDF) coloured by constellation.")
    ap.add_argument("--verbose", action="store_true",
                    help="Print progress lines to stderr.")

    args = ap.parse_args(argv)

    try:
        if args.threshold < 0:
            raise ValueError("--threshold must be >= 0.")
        if args.threshold > 3 * LINK_THRESHOLD:
            print(f"[warn] threshold {args.threshold} is far above the default {LINK_THRESHOLD}; "
                  "most points will end up in one constellation.", file=sys.stderr)

        points = load_points(args.input)
        if args.verbose:
            print(f"[info] read {points.shape[0]} points from {args.input}", file=sys.stderr)

        if args.method == "merge":
            consts = Constellations(points, threshold=args.threshold)
            n_groups = consts.run(verbose=args.verbose)
            frame = consts.to_frame()
        else:
            labels = cluster_points_connected_components(points, threshold=args.threshold)
            frame = points_frame(points)
            frame["constellation"] = labels
            n_groups = int(frame["constellation"].nunique())
            if args.verbose:
                print(f"[info] union-find: {points.shape[0]} points -> {n_groups} constellations "
                      f"(threshold={args.threshold})", file=sys.stderr)

        if args.labels_out:
            frame.to_csv(args.labels_out, index=False)
            if args.verbose:
                print(f"[info] labels written to {args.labels_out}", file=sys.stderr)

        if args.plot:
            if frame.empty:
                print("[warn] no points; skipping plot.", file=sys.stderr)
            else:
                # lazy: pulls in matplotlib
                from .plotting import plot_constellations
                plot_constellations(frame, args.plot)
                if args.verbose:
                    print(f"[info] plot written to {args.plot}", file=sys.stderr)

        print(f"constellations: {n_groups}")

    except Exception as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
