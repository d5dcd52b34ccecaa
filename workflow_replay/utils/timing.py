"""Human-like timing for replayed actions.

Delays are drawn from a normal distribution centred on a base duration, so
replayed sessions don't tick along at machine-perfect intervals.
"""
import math
import random
import time
from typing import Callable, Optional


class TimingModel:
    """
    Produces randomized, human-plausible delays in milliseconds.

    The random source and the sleep function are injectable so tests can
    seed the generator and capture sleeps instead of waiting.

    Usage:
        timing = TimingModel(rng=random.Random(42))
        timing.sleep(timing.thinking_delay())
    """

    MICRO_PAUSE_PROBABILITY = 0.15

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        sleep_fn: Optional[Callable[[float], None]] = None
    ):
        """
        Args:
            rng: Random generator (defaults to an OS-seeded one)
            sleep_fn: Called with seconds to suspend (defaults to time.sleep)
        """
        self.rng = rng or random.Random()
        self.sleep_fn = sleep_fn or time.sleep

    def gaussian(self) -> float:
        """Standard normal sample via the Box-Muller transform."""
        # random() is in [0, 1); shift to (0, 1] so log() never sees zero
        u1 = 1.0 - self.rng.random()
        u2 = self.rng.random()
        return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)

    def delay(self, base_ms: float, variance: float = 0.3) -> int:
        """
        Draw a delay centred on base_ms.

        The range [base*(1-variance), base*(1+variance)] spans six standard
        deviations. The result is floored and can be negative; sleep() clamps.
        """
        low = base_ms * (1 - variance)
        high = base_ms * (1 + variance)
        mean = (low + high) / 2
        std_dev = (high - low) / 6
        return math.floor(self.gaussian() * std_dev + mean)

    # =========================================================================
    # NAMED DELAYS
    # =========================================================================

    def thinking_delay(self) -> int:
        """Pause before a step starts."""
        return self.delay(350, 0.5)

    def post_action_delay(self) -> int:
        """Pause after a step succeeds."""
        return self.delay(450, 0.4)

    def typing_delay(self) -> int:
        """Gap before each typed character."""
        return self.delay(70, 0.6)

    def micro_pause(self) -> int:
        """Occasional hesitation while typing, 0 most of the time."""
        if self.rng.random() < self.MICRO_PAUSE_PROBABILITY:
            return self.delay(180, 0.5)
        return 0

    def sleep(self, ms: float) -> float:
        """Sleep for ms milliseconds, clamping negatives to 0. Returns ms slept."""
        ms = max(0, ms)
        if ms:
            self.sleep_fn(ms / 1000)
        return ms

    def pause(self, base_ms: float, variance: float = 0.3) -> float:
        """Draw a delay and sleep it."""
        return self.sleep(self.delay(base_ms, variance))
