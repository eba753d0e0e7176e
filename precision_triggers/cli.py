"""
CLI entry point for triggered batch runs.

Usage:
    python -m precision_triggers problem.json                  # Run with settings from the file
    python -m precision_triggers problem.json --max-batches 500
    python -m precision_triggers problem.json --interval 5     # Fixed check interval (no prediction)
    python -m precision_triggers problem.json --plot history.png
"""
import argparse
import json
import os
import sys


def build_parser():
    parser = argparse.ArgumentParser(
        description='Precision-trigger batch run for Monte Carlo tallies',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m precision_triggers problem.json               Run until triggers are satisfied
  python -m precision_triggers problem.json --interval 5  Check every 5 batches
  python -m precision_triggers problem.json -o out.json   Save results to out.json
        """,
    )

    parser.add_argument('problem', help='Problem JSON file (settings, meshes, tallies, triggers)')
    parser.add_argument('--batches', '-b', type=int, default=None, help='Batch of first trigger check')
    parser.add_argument('--max-batches', type=int, default=None, help='Maximum batches')
    parser.add_argument('--inactive', type=int, default=None, help='Inactive batches')
    parser.add_argument('--interval', type=int, default=None,
                        help='Batches between trigger checks (default: predicted)')
    parser.add_argument('--surface-variance', choices=['latest', 'max'], default=None,
                        help='Variance reported by surface-current triggers')
    parser.add_argument('--seed', type=int, default=42, help='Random seed')
    parser.add_argument('--output', '-o', type=str, default=None, help='Output JSON file')
    parser.add_argument('--plot', type=str, default=None, help='Save convergence chart to this path')
    parser.add_argument('--quiet', '-q', action='store_true', help='Minimal output')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    from .problem import load_problem
    from .settings import TriggerSettings
    from .sources import SyntheticSource
    from .driver import TriggeredRun
    from .messages import ConsoleSink

    problem, data = load_problem(args.problem)
    raw_settings = dict(data.get('settings', {}))
    overrides = {
        'batches': args.batches,
        'max_batches': args.max_batches,
        'inactive': args.inactive,
        'batch_interval': args.interval,
        'surface_variance': args.surface_variance,
    }
    raw_settings.update({k: v for k, v in overrides.items() if v is not None})
    settings = TriggerSettings.from_dict(raw_settings)

    source = SyntheticSource.from_dict(problem, data.get('source'))

    solver = TriggeredRun(
        source=source,
        problem=problem,
        settings=settings,
        sink=ConsoleSink(verbose=not args.quiet),
        seed=args.seed,
    )
    result = solver.solve(verbose=not args.quiet)

    output_path = args.output or os.path.join(os.getcwd(), 'results', 'trigger_results.json')
    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump({'settings': settings.to_dict(), **result.to_dict()}, f, indent=2)
    if not args.quiet:
        print(f"\nResults saved to {output_path}")

    if args.plot:
        from .report import plot_trigger_history
        plot_trigger_history(result.evaluations, args.plot)
        if not args.quiet:
            print(f"Convergence chart saved to {args.plot}")

    return 0 if result.satisfied or not settings.trigger_active else 1


if __name__ == '__main__':
    sys.exit(main())
