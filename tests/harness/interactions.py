"""Pilot wrappers with settling for Textual in-process tests.

Thin wrappers that wait for thread workers and then for the app to go idle
after each interaction, instead of fixed sleeps.
"""

from textual.pilot import Pilot


async def settle(pilot: Pilot) -> None:
    """Wait for loader workers to finish and their results to be applied."""
    await pilot.pause()
    await pilot.app.workers.wait_for_complete()
    await pilot.pause()


async def press_and_settle(pilot: Pilot, *keys: str) -> None:
    """Press keys in order and wait for app to settle."""
    await pilot.press(*keys)
    await settle(pilot)


async def press_sequence(pilot: Pilot, keys: list[str]) -> None:
    """Press keys one at a time, settling after each."""
    for key in keys:
        await pilot.press(key)
        await settle(pilot)


async def resize_and_settle(pilot: Pilot, width: int, height: int) -> None:
    """Resize terminal and wait for app to settle."""
    await pilot.resize_terminal(width, height)
    await settle(pilot)
