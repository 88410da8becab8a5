#!/usr/bin/env python3
"""
02_interaction_monitor.py: Adaptive aggressiveness and debounce

Demonstrates:
1. Recording accepted/rejected/ignored suggestions
2. Happiness score and the aggressiveness level it maps to
3. Capping ignored suggestions so they do not drown out feedback
4. Debounce delays that back off after rejections

No API keys required.
"""

from next_edit_context import DebounceConfig, UserHappinessScoreConfiguration, UserInteractionMonitor


def section(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"{title}")
    print("=" * 60)


class ManualClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def main() -> None:
    clock = ManualClock()
    monitor = UserInteractionMonitor(DebounceConfig(base_debounce_ms=200), clock=clock)

    # ------------------------------------------------------------------ #
    section("1. Neutral start")
    # ------------------------------------------------------------------ #

    print(f"Score: {monitor.get_user_happiness_score():.3f}")
    print(f"Aggressiveness: {monitor.get_aggressiveness_level().value}")

    # ------------------------------------------------------------------ #
    section("2. A happy user")
    # ------------------------------------------------------------------ #

    for _ in range(6):
        clock.now += 5
        monitor.handle_acceptance()
    print(f"Score: {monitor.get_user_happiness_score():.3f}")
    print(f"Aggressiveness: {monitor.get_aggressiveness_level().value}")
    print(f"Debounce: {monitor.get_expected_debounce_time(200):.0f} ms")

    # ------------------------------------------------------------------ #
    section("3. Rejections and ignored suggestions")
    # ------------------------------------------------------------------ #

    for _ in range(3):
        clock.now += 5
        monitor.handle_rejection()
        monitor.handle_ignored()
    capped = UserHappinessScoreConfiguration(limit_total_ignored=True, ignored_limit=1, include_ignored=True)
    print(f"Score (ignored skipped): {monitor.get_user_happiness_score():.3f}")
    print(f"Score (one ignored counted): {monitor.get_user_happiness_score(capped):.3f}")
    print(f"Aggressiveness: {monitor.get_aggressiveness_level().value}")

    # ------------------------------------------------------------------ #
    section("4. Debounce backoff and decay")
    # ------------------------------------------------------------------ #

    session = monitor.create_delay_session(request_time=clock.now)
    print(f"Expected debounce now: {session.expected_total_ms:.0f} ms")
    print(f"Still to wait after 100 ms: {session.get_debounce_time(now=clock.now + 0.1):.0f} ms")
    clock.now += 5 * 60
    print(f"Expected debounce 5 minutes later: {monitor.get_expected_debounce_time(200):.0f} ms")
    clock.now += 10 * 60
    print(f"Expected debounce 15 minutes later: {monitor.get_expected_debounce_time(200):.0f} ms")


if __name__ == "__main__":
    main()
