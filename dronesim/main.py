import asyncio
import logging

import uvicorn

from dronesim.api.api_main import create_command_app, create_stream_app
from dronesim.config import settings, setup_logging
from dronesim.drone.orchestrator import Orchestrator
from dronesim.messaging.mqtt import MqttClient

logger = logging.getLogger(__name__)


def _build_mqtt() -> MqttClient | None:
    if not settings.mqtt_enabled:
        logger.info("MQTT publishing disabled in configuration")
        return None
    return MqttClient(
        settings.mqtt_broker,
        settings.mqtt_port,
        settings.mqtt_user,
        settings.mqtt_pass,
        use_tls=settings.mqtt_use_tls,
        ca_certs=settings.mqtt_ca_certs or None,
        client_id=f"{settings.telemetry_topic_prefix}-{settings.drone_id}",
    )


def _server(app, port: int) -> uvicorn.Server:
    config = uvicorn.Config(app, host=settings.bind_host, port=port, log_config=None)
    return uvicorn.Server(config)


async def main():
    setup_logging(settings.log_level)

    mqtt = _build_mqtt()
    orch = Orchestrator(settings, publisher=mqtt)
    orch.start()

    commands = _server(create_command_app(orch), settings.listen_port)
    stream = _server(create_stream_app(orch), settings.socket_port)
    logger.info(
        f"Listening for commands on :{settings.listen_port}, "
        f"pushing telemetry on :{settings.socket_port}"
    )

    servers = [asyncio.create_task(commands.serve()), asyncio.create_task(stream.serve())]
    try:
        await asyncio.wait(servers, return_when=asyncio.FIRST_COMPLETED)
        # a signal only reaches one of the servers
        commands.should_exit = True
        stream.should_exit = True
        await asyncio.gather(*servers, return_exceptions=True)
    finally:
        await orch.stop()
        if mqtt is not None:
            mqtt.close()


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.info("Program terminated")


if __name__ == "__main__":
    run()
