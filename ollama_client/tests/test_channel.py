"""Tests for DeliveryChannel ordering, backpressure and close semantics."""

import asyncio

import pytest

from ollama_client.streaming.channel import ChannelClosed, DeliveryChannel


@pytest.mark.asyncio
async def test_units_received_in_send_order():
    ch = DeliveryChannel(capacity=3)
    for i in range(3):
        await ch.send(i)
    ch.close()
    assert [await ch.receive() for _ in range(3)] == [0, 1, 2]
    with pytest.raises(ChannelClosed):
        await ch.receive()


@pytest.mark.asyncio
async def test_producer_blocks_until_previous_unit_taken():
    ch = DeliveryChannel(capacity=1)
    await ch.send("a")
    pending = asyncio.create_task(ch.send("b"))
    await asyncio.sleep(0.01)
    assert not pending.done()
    assert await ch.receive() == "a"
    await asyncio.wait_for(pending, 1)
    assert await ch.receive() == "b"


@pytest.mark.asyncio
async def test_close_with_final_unit_never_blocks():
    ch = DeliveryChannel(capacity=1)
    await ch.send(1)
    ch.close(final=99)
    assert ch.closed is True
    assert await ch.receive() == 1
    assert await ch.receive() == 99
    with pytest.raises(ChannelClosed):
        await ch.receive()


@pytest.mark.asyncio
async def test_receive_on_closed_channel_does_not_hang():
    ch = DeliveryChannel()
    ch.close()
    for _ in range(2):
        with pytest.raises(ChannelClosed):
            await asyncio.wait_for(ch.receive(), 1)


@pytest.mark.asyncio
async def test_close_is_idempotent():
    ch = DeliveryChannel()
    ch.close(final="first")
    ch.close(final="second")
    assert await ch.receive() == "first"
    with pytest.raises(ChannelClosed):
        await ch.receive()


@pytest.mark.asyncio
async def test_send_after_close_raises():
    ch = DeliveryChannel()
    ch.close()
    with pytest.raises(ChannelClosed):
        await ch.send(1)


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        DeliveryChannel(capacity=0)
