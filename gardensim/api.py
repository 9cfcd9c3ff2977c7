# gardensim/api.py
"""
GardenSimulationAPI
-------------------
Thread-safe facade over one simulated garden.

- SimulationContext builds and owns every collaborator (garden, clock,
  weather, scheduler, controller, modules). One context per API instance,
  nothing process-wide.
- Every mutating or snapshot-producing call holds a single RLock.
- Snapshots and log lines produced under the lock are queued and delivered
  to subscribers only after the outermost lock is released, so an observer
  may call back into the API.

Typical use:

    api = GardenSimulationAPI(cfg)
    api.initialize_garden()
    with api.subscribe(on_state=print):
        api.rain(12)
        api.advance_hour_automatically()
"""

import logging
import threading
from collections import deque
from contextlib import contextmanager
from typing import Callable, Optional

import numpy as np

from gardensim.clock import HOURS_PER_DAY, SimulationClock
from gardensim.config import get_default_config, load_plant_templates
from gardensim.errors import (DuplicatePlantError, InvalidTemperatureError, UninitializedError,
                              UnknownPlantTypeError)
from gardensim.events import AutoEventConfig, AutoEventScheduler
from gardensim.garden import Garden
from gardensim.hardware import ModuleManager, sanitize_parasite_name
from gardensim.logbook import GardenLogger
from gardensim.plant import StressTunables
from gardensim.sensors import SensorController
from gardensim.slice_processor import RainfallPolicy, SliceProcessor
from gardensim.state import StateManager, plant_alerts, plant_status_lines
from gardensim.weather import WeatherModel, WeatherTelemetry

logger = logging.getLogger(__name__)

DEFAULT_SEED_INSTANCES = 2


class SimulationContext:
    """Wires up one simulation from a config dict."""

    def __init__(self, cfg, event_log):
        cfg = cfg or {}
        self.cfg = cfg
        self.event_log = event_log
        self.rng = np.random.default_rng(cfg.get('seed'))

        self.templates = load_plant_templates(cfg)
        self.tunables = StressTunables.from_cfg(cfg.get('plant_stress'))
        self.garden = Garden(cfg.get('garden'), templates=self.templates.values(),
                             tunables=self.tunables)
        self.clock = SimulationClock()
        self.weather = WeatherModel(rng=self.rng)
        self.telemetry = WeatherTelemetry(rng=self.rng)
        self.scheduler = AutoEventScheduler(self.weather, AutoEventConfig.from_cfg(cfg.get('auto_events')))
        self.rainfall_policy = RainfallPolicy((cfg.get('rainfall') or {}).get('allowance_factor', 1.5))
        self.state_manager = StateManager(self.garden, self.clock, self.weather, self.telemetry)
        self.modules = ModuleManager(self.garden, self.rainfall_policy, event_log)
        self.sensors = SensorController(self.modules, event_log, cfg.get('controller'))
        self.slice_processor = SliceProcessor(self.garden, self.clock, self.weather, self.scheduler,
                                              self.telemetry, self.rainfall_policy, event_log)

    def reset(self):
        self.garden.reset()
        self.clock.reset()
        self.scheduler.reset()
        self.telemetry.reset()
        self.sensors.reset()


class Subscription:
    """Handle returned by `subscribe`; cancel it (or leave the with-block) to stop receiving."""

    def __init__(self, registry, on_state=None, on_log=None):
        self._registry = registry
        self.on_state = on_state
        self.on_log = on_log
        self.active = True

    def cancel(self):
        if self.active:
            self.active = False
            self._registry.unsubscribe(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cancel()


class ObserverRegistry:
    def __init__(self):
        self._lock = threading.Lock()
        self._subs = []

    def subscribe(self, on_state=None, on_log=None):
        sub = Subscription(self, on_state, on_log)
        with self._lock:
            self._subs.append(sub)
        return sub

    def unsubscribe(self, sub):
        with self._lock:
            if sub in self._subs:
                self._subs.remove(sub)

    def __len__(self):
        with self._lock:
            return len(self._subs)

    def publish(self, kind, payload):
        with self._lock:
            subs = list(self._subs)
        for sub in subs:
            callback = sub.on_state if kind == 'state' else sub.on_log
            if callback is None or not sub.active:
                continue
            try:
                callback(payload)
            except Exception:
                # one broken observer must not stop delivery to the rest
                logger.exception("observer %r failed on %s notification", callback, kind)


class GardenSimulationAPI:
    def __init__(self, cfg=None, log_path=None):
        cfg = cfg if cfg is not None else get_default_config()
        log_cfg = cfg.get('log') or {}
        self.event_log = GardenLogger(log_path or log_cfg.get('path'),
                                      tail_limit=int(log_cfg.get('tail_limit', 250)))
        self.context = SimulationContext(cfg, self.event_log)

        self._lock = threading.RLock()
        self._local = threading.local()
        self._pending = deque()
        self.observers = ObserverRegistry()
        self.event_log.add_listener(self._queue_log_line)

        self.initialized = False
        self.auto_events_enabled = True

    # Locking / notification -------------------------------------------------
    @contextmanager
    def _guarded(self):
        try:
            with self._lock:
                self._local.depth = getattr(self._local, 'depth', 0) + 1
                try:
                    yield
                finally:
                    self._local.depth -= 1
        finally:
            if self._local.depth == 0:
                self._deliver_pending()

    def _queue_log_line(self, line):
        self._pending.append(('log', line))

    def _queue_state(self, snapshot):
        self._pending.append(('state', snapshot))

    def _deliver_pending(self):
        while True:
            try:
                kind, payload = self._pending.popleft()
            except IndexError:
                return
            self.observers.publish(kind, payload)

    def _ensure_initialized(self):
        if not self.initialized:
            raise UninitializedError()

    def _log(self, tag, message):
        return self.event_log.log(tag, message)

    def _plant_or_log(self, name, plant_type):
        try:
            plant = self.context.garden.plant_new(name, plant_type)
        except DuplicatePlantError as e:
            self._log("PLANT_ERROR", str(e))
            return None
        if plant is None:
            self._log("PLANT_ERROR", str(UnknownPlantTypeError(plant_type, name)))
        return plant

    # Lifecycle --------------------------------------------------------------
    def initialize_garden(self):
        """Reset everything and seed plants from the configured templates."""
        with self._guarded():
            ctx = self.context
            ctx.reset()
            if ctx.templates:
                plan = [(t.type, t.instances) for t in ctx.templates.values()]
            else:
                self._log("CONFIG", "No plant templates configured. Falling back to default templates.")
                plan = [(ptype, DEFAULT_SEED_INSTANCES) for ptype in ctx.garden.available_types]

            for plant_type, instances in plan:
                for i in range(1, instances + 1):
                    name = f"{plant_type}-{i:03d}"
                    if self._plant_or_log(name, plant_type) is not None:
                        self._log("PLANT", f"Seeded {name} ({plant_type})")

            self.initialized = True
            self._refresh_water_stats()
            self._log("INIT", f"Garden initialized with {len(ctx.garden.plants)} plants")
            self._queue_state(ctx.state_manager.capture())

    def close(self):
        self.event_log.remove_listener(self._queue_log_line)
        self.event_log.close()

    # Queries ----------------------------------------------------------------
    def get_plants(self):
        """{'plants': names, 'water_requirement': ints, 'parasites': lists} in planting order."""
        with self._guarded():
            self._ensure_initialized()
            plants = self.context.garden.plants
            return {
                'plants': [p.name for p in plants],
                'water_requirement': [p.water_requirement for p in plants],
                'parasites': [list(p.vulnerable_parasites) for p in plants],
            }

    def get_state(self):
        """Log the day summary plus per-plant status, notify observers and return the snapshot."""
        with self._guarded():
            self._ensure_initialized()
            snapshot = self.context.state_manager.capture()
            self._log("STATE", StateManager.summarize(snapshot))
            for line in plant_status_lines(snapshot):
                self._log("PLANT_STATUS", line)
            self._queue_state(snapshot)
            return snapshot

    def current_state(self):
        with self._guarded():
            self._ensure_initialized()
            return self.context.state_manager.capture()

    def get_min_water_requirement(self):
        with self._guarded():
            self._ensure_initialized()
            return self.context.state_manager.min_water_requirement

    def get_max_water_requirement(self):
        with self._guarded():
            self._ensure_initialized()
            return self.context.state_manager.max_water_requirement

    def get_max_rainfall_allowance(self):
        with self._guarded():
            self._ensure_initialized()
            return self.context.rainfall_policy.max_allowance

    def get_hours_elapsed(self):
        with self._guarded():
            self._ensure_initialized()
            return self.context.clock.hours_elapsed

    def module_status(self):
        with self._guarded():
            self._ensure_initialized()
            return self.context.modules.module_status()

    # Mutations ----------------------------------------------------------------
    def plant(self, name, plant_type):
        with self._guarded():
            self._ensure_initialized()
            if self._plant_or_log(name, plant_type) is None:
                return False
            self._log("PLANT", f"Planted {name} ({plant_type})")
            self._after_mutation()
            return True

    def rain(self, amount):
        """Apply rainfall clamped into the rainfall bounds; returns the applied amount."""
        with self._guarded():
            self._ensure_initialized()
            ctx = self.context
            policy = ctx.rainfall_policy
            applied = policy.clamp(amount)
            if applied != amount:
                self._log("RAIN", f"Requested {amount} units. Clamped to {applied}.")
            if policy.exceeds_recommended(applied):
                self._log("RAIN", f"Warning: {applied} units exceed recommended max of "
                                  f"{policy.max_requirement}; plants may be flooded")
            ctx.garden.apply_rainfall(applied)
            ctx.telemetry.record_rainfall(applied, ctx.clock.hours_elapsed)
            self._log("RAIN", f"Rainfall applied: {applied} units")
            self._after_mutation()
            return applied

    def temperature(self, degrees_f):
        """Set air temperature; out-of-range values are logged and rejected (returns False)."""
        with self._guarded():
            self._ensure_initialized()
            ctx = self.context
            try:
                ctx.garden.apply_temperature(degrees_f)
            except InvalidTemperatureError as e:
                self._log("InvalidTemperatureError", str(e))
                return False
            ctx.telemetry.record_temperature(degrees_f)
            self._log("TEMPERATURE", f"Temperature set to {ctx.garden.air_temperature}°F")
            self._after_mutation()
            return True

    def parasite(self, name):
        """Release a pest; returns the names of newly infested plants."""
        with self._guarded():
            self._ensure_initialized()
            cleaned = sanitize_parasite_name(name)
            if not cleaned:
                self._log("PARASITE", "Ignored parasite event because name was empty")
                return []
            self._log_affected_plants(cleaned)
            infected = self.context.garden.trigger_parasite_infestation(cleaned)
            self._after_mutation()
            return infected

    def treat(self, name):
        """Manual treatment regardless of the pest-control module; returns plants treated."""
        with self._guarded():
            self._ensure_initialized()
            cleaned = sanitize_parasite_name(name)
            if not cleaned:
                self._log("TREATMENT", "Ignored treatment because name was empty")
                return 0
            treated = self.context.garden.treat_parasite(cleaned)
            self._log("TREATMENT", f"Treated {cleaned}: {treated} plant(s)")
            self._after_mutation()
            return treated

    # Time -------------------------------------------------------------------
    def advance_hour_manually(self):
        self._advance_hour("Next hour requested")

    def advance_hour_automatically(self):
        self._advance_hour("Timer auto advance")

    def process_auto_slices(self, count):
        """Run up to `count` slices of the current hour; returns how many ran."""
        with self._guarded():
            self._ensure_initialized()
            to_run = max(0, min(int(count), self.context.clock.remaining_slices()))
            for _ in range(to_run):
                self._run_slice()
            if to_run:
                self._after_mutation(run_controller=False)
            return to_run

    def _advance_hour(self, reason):
        with self._guarded():
            self._ensure_initialized()
            ctx = self.context
            # finish whatever is left of this hour before closing it
            while not ctx.clock.is_hour_complete():
                self._run_slice()
            ctx.clock.advance_hour()
            ctx.modules.update_all_modules()
            if ctx.clock.hours_elapsed % HOURS_PER_DAY == 0:
                ctx.garden.advance_day()
                self._log("DAY", f"Day {ctx.garden.simulation_day} completed")
            self._log("HOUR", f"{reason}. Hour {ctx.clock.hours_elapsed} closed.")
            self._after_mutation()

    def _run_slice(self):
        ctx = self.context
        if self.auto_events_enabled:
            summary = ctx.slice_processor.process_slice()
            if summary:
                self._log("AUTO", f"Automated events -> {summary}")
        else:
            ctx.slice_processor.process_slice_without_events()
        self._refresh_water_stats()
        ctx.sensors.evaluate_and_act(ctx.state_manager.capture(), ctx.rainfall_policy)

    # Auto-event settings ------------------------------------------------------
    def set_auto_events_enabled(self, enabled):
        with self._guarded():
            self._ensure_initialized()
            self.auto_events_enabled = bool(enabled)
            self._log("AUTO", "Automated weather/events enabled" if enabled
                      else "Automated weather/events disabled")

    def is_auto_events_enabled(self):
        with self._guarded():
            self._ensure_initialized()
            return self.auto_events_enabled

    def update_auto_event_config(self, config):
        """Replace the auto-event config; a dict is applied as changes to the current one."""
        with self._guarded():
            self._ensure_initialized()
            if config is None:
                return self.context.scheduler.config
            if isinstance(config, dict):
                config = self.context.scheduler.config.with_changes(**config)
            self.context.scheduler.set_config(config)
            self._log("AUTO", f"Auto-event config updated: {config}")
            return config

    # Observers ----------------------------------------------------------------
    def subscribe(self, on_state: Optional[Callable] = None, on_log: Optional[Callable] = None):
        return self.observers.subscribe(on_state, on_log)

    def recent_log_entries(self):
        return self.event_log.recent_entries()

    # Internals --------------------------------------------------------------
    def _refresh_water_stats(self):
        low, high = self.context.state_manager.refresh_water_stats()
        self.context.rainfall_policy.update(low, high)

    def _after_mutation(self, run_controller=True):
        ctx = self.context
        self._refresh_water_stats()
        snapshot = ctx.state_manager.capture()
        if run_controller and ctx.sensors.evaluate_and_act(snapshot, ctx.rainfall_policy):
            self._refresh_water_stats()
            snapshot = ctx.state_manager.capture()
        for alert in plant_alerts(snapshot):
            self._log("ALERT", alert)
        self._queue_state(snapshot)
        return snapshot

    def _log_affected_plants(self, parasite):
        affected = [p for p in self.context.garden.living_plants() if p.is_vulnerable_to(parasite)]
        if not affected:
            self._log("PARASITE", f"No plants are vulnerable to {parasite}")
            return
        for plant in affected:
            self._log("ALERT", f"ALERT: {plant.name} ({plant.type}) under attack by {parasite} "
                               f"| Health: {plant.health:.1f}%")
