import pytest
from pydantic import ValidationError

from dronesim.config import Settings


@pytest.mark.parametrize(
    "field, value",
    [
        ("battery_decrement", 0),
        ("battery_decrement", -0.01),
        ("top_speed", 0),
        ("command_queue_size", 0),
        ("tick_interval_sec", -1),
    ],
)
def test_settings_reject_values_that_break_the_motion_model(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_settings_defaults():
    s = Settings(_env_file=None)
    assert s.command_queue_size == 2
    assert s.battery_decrement == 0.01
    assert s.tick_interval_sec == 2.0
    assert s.telemetry_topic_prefix == "drone"
