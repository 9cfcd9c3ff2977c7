# gardensim/clock.py
"""
SimulationClock
---------------
Tracks elapsed simulated hours and the slices consumed within the current hour.

One hour is 6 slices (10 simulated minutes each), so a day is 144 slices.
Consuming slices never closes an hour: the caller decides when to call
`advance_hour()`, which lets it run whatever slices are left before closing.
"""

SLICES_PER_HOUR = 6
HOURS_PER_DAY = 24
SLICES_PER_DAY = SLICES_PER_HOUR * HOURS_PER_DAY


class SimulationClock:
    def __init__(self):
        self.hours_elapsed = 0
        self.slices_this_hour = 0

    def reset(self):
        self.hours_elapsed = 0
        self.slices_this_hour = 0

    def process_slices(self, count):
        """Consume up to `count` slices of the current hour; returns how many were consumed."""
        to_process = max(0, min(int(count), self.remaining_slices()))
        self.slices_this_hour += to_process
        return to_process

    def advance_hour(self):
        # a partially consumed hour is discarded
        self.hours_elapsed += 1
        self.slices_this_hour = 0

    def remaining_slices(self):
        return SLICES_PER_HOUR - self.slices_this_hour

    def is_hour_complete(self):
        return self.slices_this_hour >= SLICES_PER_HOUR

    def hour_of_day(self):
        return self.hours_elapsed % HOURS_PER_DAY

    @property
    def total_slices(self):
        """Monotone slice stamp (hours * 6 + slices this hour)."""
        return self.hours_elapsed * SLICES_PER_HOUR + self.slices_this_hour

    def __repr__(self):
        return (f"SimulationClock(hours_elapsed={self.hours_elapsed}, "
                f"slices_this_hour={self.slices_this_hour})")
