#!/usr/bin/env python3
"""
main.py - Command line runner for the garden simulation

Usage examples:
    python main.py sim_run --hours 48
    python main.py sim_run --hours 72 --no_auto_events --plot
    python main.py scenario --days 24
    python main.py show_config --config my_garden.yaml
"""
import argparse
import logging
from datetime import datetime
from pathlib import Path

import numpy as np
import yaml

from gardensim.api import GardenSimulationAPI
from gardensim.clock import HOURS_PER_DAY
from gardensim.config import load_config
from gardensim.events import ALL_PARASITES

ROOT = Path(__file__).resolve().parent


def setup_logging(prefix, verbose=False):
    log_dir = ROOT / "logs"
    log_dir.mkdir(exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"{prefix}_{timestamp}.log"

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        handlers=[
            logging.FileHandler(log_file, mode='w'),
            logging.StreamHandler()  # Also print to console
        ]
    )
    return log_file


def _load(args):
    cfg = load_config(args.config)
    if getattr(args, 'seed', None) is not None:
        cfg['seed'] = args.seed
    return cfg


def sim_run(args):
    hours = args.hours or 48
    cfg = _load(args)
    log_file = setup_logging("sim_run", args.verbose)
    logger = logging.getLogger(__name__)

    api = GardenSimulationAPI(cfg, log_path=args.event_log)
    snapshots = []
    sub = api.subscribe(on_state=snapshots.append)

    logger.info("=" * 80)
    logger.info("SIMULATION RUN STARTED")
    logger.info(f"Hours: {hours}")
    logger.info(f"Log file: {log_file}")
    logger.info(f"Auto events: {'off' if args.no_auto_events else 'on'}")
    logger.info("=" * 80)

    api.initialize_garden()
    if args.no_auto_events:
        api.set_auto_events_enabled(False)

    for _ in range(hours):
        api.advance_hour_automatically()
        if api.get_hours_elapsed() % HOURS_PER_DAY == 0:
            api.get_state()

    final = api.get_state()
    sub.cancel()
    api.close()

    logger.info("=" * 80)
    logger.info("SIMULATION RUN FINISHED")
    logger.info(f"Day {final.day}, hour {final.hours_elapsed}: "
                f"{final.alive_plants}/{final.total_plants} plants alive")
    logger.info(f"Soil moisture {final.soil.moisture:.1f}%, air {final.air_temperature}°F, "
                f"pests: {', '.join(final.soil.pests) or 'none'}")
    logger.info("=" * 80)

    if args.plot:
        from viz.plot_utils import history_from_snapshots, plot_run_summary
        plot_run_summary(history_from_snapshots(snapshots), out_dir=args.plot_dir, prefix="sim_run")


def scenario(args):
    """Drive the API with one random manual event per day, then close the day."""
    days = args.days or 24
    cfg = _load(args)
    setup_logging("scenario", args.verbose)
    rng = np.random.default_rng(cfg.get('seed'))

    api = GardenSimulationAPI(cfg, log_path=args.event_log)
    api.initialize_garden()
    api.set_auto_events_enabled(False)
    print(f"[main] Plants: {', '.join(api.get_plants()['plants'])}")

    for day in range(1, days + 1):
        kind = int(rng.integers(3))
        if kind == 0:
            amount = int(rng.integers(5, 21))
            applied = api.rain(amount)
            print(f"[main] Day {day}: rain {amount} (applied {applied})")
        elif kind == 1:
            temp = int(rng.integers(50, 121))
            api.temperature(temp)
            print(f"[main] Day {day}: temperature {temp}°F")
        else:
            pest = ALL_PARASITES[int(rng.integers(len(ALL_PARASITES)))]
            api.parasite(pest)
            print(f"[main] Day {day}: parasite {pest}")
        for _ in range(HOURS_PER_DAY):
            api.advance_hour_manually()
        snap = api.get_state()
        print(f"[main]   {snap.alive_plants}/{snap.total_plants} alive")

    api.close()


def show_config(args):
    cfg = load_config(args.config)
    print(yaml.safe_dump(cfg, sort_keys=False))


def parse_args():
    p = argparse.ArgumentParser(description="Garden simulation - command line runner")
    p.add_argument("--config", type=str, default=None, help="YAML config (default: gardensim/defaults.yaml)")
    sub = p.add_subparsers(dest="cmd")

    s = sub.add_parser("sim_run", help="Advance the garden hour by hour with automatic events and control")
    s.add_argument("--hours", type=int, help="simulated hours to run")
    s.add_argument("--seed", type=int, default=None, help="override the config seed")
    s.add_argument("--no_auto_events", action='store_true', help="Disable automatic weather/pest events")
    s.add_argument("--event_log", type=str, default=None, help="path of the tagged event log file")
    s.add_argument("--plot", action='store_true', help="Save trace plots after the run")
    s.add_argument("--plot_dir", type=str, default="viz_output/plots", help="plot directory")
    s.add_argument("--verbose", action='store_true', help="DEBUG level logging")

    sc = sub.add_parser("scenario", help="One random manual event per simulated day")
    sc.add_argument("--days", type=int, help="simulated days")
    sc.add_argument("--seed", type=int, default=None, help="override the config seed")
    sc.add_argument("--event_log", type=str, default=None, help="path of the tagged event log file")
    sc.add_argument("--verbose", action='store_true', help="DEBUG level logging")

    sub.add_parser("show_config", help="Print the effective configuration")

    return p.parse_args()


def main():
    args = parse_args()
    if not args.cmd:
        print("No command given. Use -h to see options.")
        return
    if args.cmd == "sim_run":
        sim_run(args)
    elif args.cmd == "scenario":
        scenario(args)
    elif args.cmd == "show_config":
        show_config(args)
    else:
        print("Unknown command:", args.cmd)


if __name__ == "__main__":
    main()
