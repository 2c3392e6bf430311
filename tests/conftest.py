import asyncio

import pytest

from dronesim.config import Settings


class FakePublisher:
    def __init__(self):
        self.messages = []

    def publish(self, topic, payload, qos=0, retain=False):
        self.messages.append((topic, payload))

    def topics(self):
        return [topic for topic, _ in self.messages]


class FakeWebSocket:
    def __init__(self, fail_with=None, gate=None):
        self.sent = []
        self.fail_with = fail_with
        self.gate = gate

    async def send_text(self, text):
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(text)


async def settle(rounds: int = 10):
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        drone_id=9,
        drone_name="test-drone",
        top_speed=0.5,
        latitude=0.0,
        longitude=0.0,
        tick_interval_sec=0,
        mqtt_enabled=False,
    )


@pytest.fixture
def publisher():
    return FakePublisher()
