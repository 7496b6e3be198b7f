"""Tests for the transient status banner (Layer 1)."""

import asyncio

from segment_studio.status import StatusBanner


def test_show_without_loop_persists():
    """Outside an event loop the message stays until cleared."""
    banner = StatusBanner(clear_after=0.01)
    banner.error("Failed to reorder")
    assert banner.kind == "error"
    assert banner.message == "Failed to reorder"
    banner.clear()
    assert banner.message is None


def test_new_message_restarts_timer():
    """A later message isn't cleared by the earlier timer."""
    banner = StatusBanner(clear_after=0.2)

    async def run():
        banner.success("first")
        await asyncio.sleep(0.1)
        banner.error("second")
        await asyncio.sleep(0.15)
        still = banner.message
        await asyncio.sleep(0.2)
        return still

    assert asyncio.run(run()) == "second"
    assert banner.message is None
