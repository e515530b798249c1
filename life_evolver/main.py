#!/usr/bin/env python3
"""CLI for evolving Game of Life starting configurations."""

import argparse
import sys
from pathlib import Path

from .errors import LifeEvolverError
from .experiments import sweep, summarize, export_results_csv
from .metrics import describe_run
from .search import EvolutionaryEngine
from .storage import ConfigurationDatabase, load_configuration, save_configuration
from .visualize import render_text, visualize_configuration


def _engine_parameters(args) -> dict:
    return {
        "height": args.height,
        "width": args.width,
        "pop_size": args.population,
        "num_gens": args.generations,
        "sim_generations": args.steps,
        "num_elites": args.elites,
        "tournament_size": args.tournament,
        "mutation_chance": args.mutation,
        "crossover_chance": args.crossover,
        "hypermutation": args.hypermutation,
        "hypermutation_threshold": args.hyper_threshold,
    }


def cmd_search(args):
    """Run the genetic algorithm."""
    params = _engine_parameters(args)
    print(f"Starting evolutionary search...")
    print(f"  Grid: {args.height}x{args.width}")
    print(f"  Population: {args.population}")
    print(f"  Generations: {args.generations}")
    print(f"  Simulation steps: {args.steps}")
    print()

    db = ConfigurationDatabase(args.database)
    engine = EvolutionaryEngine(seed=args.seed, **params)
    result = engine.run(verbose=True)

    best = result.best_individual
    db.add(best, generation=result.generation, parameters=params)

    print(f"\nBest configuration (score {best.fitness:.1f}):")
    print(render_text(best.grid))
    if result.hypermutation_events:
        print(f"Hypermutation triggered at generations: {result.hypermutation_events}")

    if args.save:
        save_configuration(best, args.save)
        print(f"\nSaved best configuration to: {args.save}")

    if args.visualize:
        output_dir = Path(args.output)
        gif_path, _ = visualize_configuration(best, steps=args.steps, output_dir=str(output_dir))
        print(f"Saved animation to: {gif_path}")


def cmd_evaluate(args):
    """Score a configuration loaded from a text file."""
    config = load_configuration(args.file)
    stats = describe_run(config, generations=args.steps)

    print(f"Evaluating {args.file} ({config.height}x{config.width})")
    print(f"  Steps: {args.steps}")
    print()
    print("Run statistics:")
    print(f"  Initial population:    {stats.initial_population}")
    print(f"  Final population:      {stats.final_population}")
    print(f"  Peak population:       {stats.peak_population}")
    print(f"  Final clusters:        {stats.final_clusters}")
    print(f"  Activity persistence:  {stats.activity_persistence:.4f}")
    print(f"  Period:                {stats.period if stats.period else '-'}")
    print()
    print(f"Fitness: {stats.fitness:.1f}")


def cmd_show(args):
    """Print a configuration from a text file."""
    config = load_configuration(args.file)
    print(render_text(config.grid))


def cmd_visualize(args):
    """Save a GIF and snapshots of a configuration's run."""
    config = load_configuration(args.file)
    gif_path, snapshot_paths = visualize_configuration(
        config,
        steps=args.steps,
        output_dir=args.output,
        name=Path(args.file).stem,
        cell_size=args.cell_size,
    )

    print(f"Saved:")
    print(f"  Animation: {gif_path}")
    for path in snapshot_paths:
        print(f"  Snapshot: {path}")


def cmd_sweep(args):
    """Run the search over a grid of mutation/crossover settings."""
    results = sweep(
        mutation_chances=args.mutation_chances,
        crossover_chances=args.crossover_chances,
        hypermutation_options=(False, True) if args.with_hypermutation else (False,),
        trials=args.trials,
        seed=args.seed,
        height=args.height,
        width=args.width,
        pop_size=args.population,
        num_gens=args.generations,
        sim_generations=args.steps,
    )

    print(f"\n{'Mutation':<10}{'Crossover':<11}{'Hyper':<7}{'Mean':<10}{'Std':<10}{'Max':<10}")
    print("-" * 58)
    for row in summarize(results):
        print(f"{row['mutation_chance']:<10.1f}{row['crossover_chance']:<11.1f}"
              f"{str(row['hypermutation']):<7}{row['mean_best']:<10.1f}"
              f"{row['std_best']:<10.1f}{row['max_best']:<10.1f}")

    if args.csv:
        export_results_csv(results, args.csv)
        print(f"\nExported {len(results)} trials to {args.csv}")


def cmd_leaderboard(args):
    """Show the best configurations found so far."""
    db = ConfigurationDatabase(args.database)

    if len(db) == 0:
        print("No configurations discovered yet. Run a search first!")
        return

    leaderboard = db.get_leaderboard(args.top)

    print(f"Top {len(leaderboard)} discovered configurations:\n")
    print(f"{'Rank':<6}{'Score':<12}{'Size':<8}{'Alive':<8}{'Discovered':<20}")
    print("-" * 54)

    for i, entry in enumerate(leaderboard, 1):
        alive = sum(row.count("1") for row in entry.rows)
        size = f"{entry.height}x{entry.width}"
        print(f"{i:<6}{entry.score:<12.1f}{size:<8}{alive:<8}{entry.discovered_at[:19]:<20}")
        if args.show:
            print(render_text(entry.configuration().grid))


def cmd_export(args):
    """Export discovered configurations to CSV."""
    db = ConfigurationDatabase(args.database)

    if len(db) == 0:
        print("No configurations to export.")
        return

    db.export_csv(args.output)
    print(f"Exported {len(db)} configurations to {args.output}")


def _add_grid_arguments(parser):
    parser.add_argument("--height", type=int, default=12, help="Grid height")
    parser.add_argument("--width", type=int, default=12, help="Grid width")
    parser.add_argument("-p", "--population", type=int, default=50, help="Population size")
    parser.add_argument("-g", "--generations", type=int, default=50, help="Number of generations")
    parser.add_argument("--steps", type=int, default=30, help="Simulation steps per evaluation")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Life Evolver - evolve interesting Game of Life starting configurations"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Search command
    search_parser = subparsers.add_parser("search", help="Run the evolutionary search")
    _add_grid_arguments(search_parser)
    search_parser.add_argument("-e", "--elites", type=int, default=2, help="Number of elites")
    search_parser.add_argument("-t", "--tournament", type=int, default=3, help="Tournament size")
    search_parser.add_argument("-m", "--mutation", type=float, default=5.0, help="Mutation chance (percent)")
    search_parser.add_argument("-c", "--crossover", type=float, default=70.0, help="Crossover chance (percent)")
    search_parser.add_argument("--hypermutation", action="store_true", help="Enable hypermutation")
    search_parser.add_argument("--hyper-threshold", type=float, default=0.9,
                               help="Fraction of the previous average fitness that triggers hypermutation")
    search_parser.add_argument("--database", type=str, default="discovered_configurations.json",
                               help="Database file")
    search_parser.add_argument("-s", "--save", type=str, default=None, help="Write best configuration as text")
    search_parser.add_argument("-o", "--output", type=str, default="output", help="Output directory")
    search_parser.add_argument("-v", "--visualize", action="store_true", help="Visualize best result")
    search_parser.set_defaults(func=cmd_search)

    # Evaluate command
    eval_parser = subparsers.add_parser("evaluate", help="Score a configuration file")
    eval_parser.add_argument("file", type=str, help="Text grid of 0s and 1s")
    eval_parser.add_argument("--steps", type=int, default=30, help="Simulation steps")
    eval_parser.set_defaults(func=cmd_evaluate)

    # Show command
    show_parser = subparsers.add_parser("show", help="Print a configuration file")
    show_parser.add_argument("file", type=str, help="Text grid of 0s and 1s")
    show_parser.set_defaults(func=cmd_show)

    # Visualize command
    viz_parser = subparsers.add_parser("visualize", help="Render a configuration's run")
    viz_parser.add_argument("file", type=str, help="Text grid of 0s and 1s")
    viz_parser.add_argument("--steps", type=int, default=30, help="Simulation steps")
    viz_parser.add_argument("--cell-size", type=int, default=16, help="Cell size in pixels")
    viz_parser.add_argument("-o", "--output", type=str, default="output", help="Output directory")
    viz_parser.set_defaults(func=cmd_visualize)

    # Sweep command
    sweep_parser = subparsers.add_parser("sweep", help="Compare mutation/crossover settings")
    _add_grid_arguments(sweep_parser)
    sweep_parser.set_defaults(population=20, generations=20)
    sweep_parser.add_argument("--mutation-chances", type=float, nargs="+", default=[1.0, 5.0, 10.0],
                              help="Mutation chances to try (percent)")
    sweep_parser.add_argument("--crossover-chances", type=float, nargs="+", default=[0.0, 50.0, 90.0],
                              help="Crossover chances to try (percent)")
    sweep_parser.add_argument("--with-hypermutation", action="store_true",
                              help="Also try every combination with hypermutation")
    sweep_parser.add_argument("-n", "--trials", type=int, default=3, help="Runs per combination")
    sweep_parser.add_argument("--csv", type=str, default=None, help="Export per-trial results")
    sweep_parser.set_defaults(func=cmd_sweep)

    # Leaderboard command
    lb_parser = subparsers.add_parser("leaderboard", help="Show top discovered configurations")
    lb_parser.add_argument("-n", "--top", type=int, default=20, help="Number of configurations to show")
    lb_parser.add_argument("--show", action="store_true", help="Print each grid")
    lb_parser.add_argument("--database", type=str, default="discovered_configurations.json",
                           help="Database file")
    lb_parser.set_defaults(func=cmd_leaderboard)

    # Export command
    export_parser = subparsers.add_parser("export", help="Export configurations to CSV")
    export_parser.add_argument("-o", "--output", type=str, default="configurations.csv", help="Output CSV file")
    export_parser.add_argument("--database", type=str, default="discovered_configurations.json",
                               help="Database file")
    export_parser.set_defaults(func=cmd_export)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except (LifeEvolverError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
