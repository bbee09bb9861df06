import argparse
import sys

from metrics import clamp_thresholds, parse_metric, threshold_upper_boundary
from pixel_sorter import IMAGE_ERRORS, sort_file


def metric_arg(value):
    try:
        return parse_metric(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def threshold_arg(value):
    try:
        threshold = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"threshold must be an integer, got {value!r}")
    if threshold < 0:
        raise argparse.ArgumentTypeError(f"threshold cannot be negative, got {threshold}")
    return threshold


def thread_count_arg(value):
    count = int(value)
    if count < 1:
        raise argparse.ArgumentTypeError("thread count must be at least 1")
    return count


def build_parser():
    parser = argparse.ArgumentParser(
        prog="porter",
        description="Porter - Create glitch art by sorting pixels. "
        "Run without arguments to open the GUI.",
    )
    parser.add_argument(
        "method",
        type=metric_arg,
        help="Sorting method: l (luminance), h (hue) or s (saturation)",
    )
    parser.add_argument(
        "lower", type=threshold_arg, help="Lower threshold, inclusive"
    )
    parser.add_argument(
        "higher", type=threshold_arg, help="Higher threshold, inclusive"
    )
    parser.add_argument("images", nargs="+", help="Images to sort")
    parser.add_argument(
        "-o",
        "--output-dir",
        default=None,
        help="Directory for sorted images (default: current directory)",
    )
    parser.add_argument(
        "-p",
        "--parallel",
        action="store_true",
        help="Sort rows on multiple threads",
    )
    parser.add_argument(
        "-j",
        "--threads",
        type=thread_count_arg,
        default=None,
        help="Number of threads for --parallel (default: CPU cores - 1)",
    )
    return parser


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        from porter_app import main as gui_main

        return gui_main()

    args = build_parser().parse_args(argv)

    if args.lower > args.higher:
        print(
            "ERROR: lower threshold cannot be bigger than a higher threshold.",
            file=sys.stderr,
        )
        return 1

    lower, higher = clamp_thresholds(args.method, args.lower, args.higher)
    if (lower, higher) != (args.lower, args.higher):
        print(
            f"Warning: thresholds clamped to {lower}-{higher} "
            f"(maximum for {args.method.value} is {threshold_upper_boundary(args.method)})",
            file=sys.stderr,
        )

    failed = 0
    for path in args.images:
        print(f"Processing {path}...")
        try:
            sort_file(
                path,
                args.method,
                lower,
                higher,
                output_dir=args.output_dir,
                parallel=args.parallel or args.threads is not None,
                num_threads=args.threads,
            )
        except IMAGE_ERRORS as e:
            print(f"ERROR: Failed to sort image {path}: {e}", file=sys.stderr)
            failed += 1

    if failed:
        print(f"{failed} of {len(args.images)} images failed.", file=sys.stderr)
        return 1

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
