import json
import ssl
import time
import socket
import logging
from typing import Optional

import paho.mqtt.client as mqtt

logger = logging.getLogger(__name__)


class MqttClient:
    """Publishes telemetry to the broker; one topic per drone."""

    def __init__(
            self,
            host: str,
            port: int = 1883,
            username: str = "",
            password: str = "",
            use_tls: bool = False,
            ca_certs: Optional[str] = None,
            client_id: Optional[str] = None,
            max_retries: int = 10,
            retry_backoff_s: float = 0.5,
    ):

        self.client = mqtt.Client(
            client_id=client_id or "",
            protocol=mqtt.MQTTv311,
            transport="tcp",
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        )

        if username:
            self.client.username_pw_set(username, password)

        if use_tls:
            if ca_certs:
                self.client.tls_set(
                    ca_certs=ca_certs, tls_version=ssl.PROTOCOL_TLS_CLIENT
                )
            else:
                self.client.tls_set(tls_version=ssl.PROTOCOL_TLS_CLIENT)
            self.client.tls_insecure_set(False)

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_log = self._on_log

        attempt, delay = 0, retry_backoff_s
        last_err = None
        while attempt < max_retries:
            try:
                self.client.connect(host, port, keepalive=60)
                break
            except (ConnectionRefusedError, TimeoutError, socket.error) as e:
                last_err = e
                logger.warning(f"[MQTT] Connect attempt {attempt + 1} to {host}:{port} failed: {e}")
                time.sleep(delay)
                delay = min(delay * 2, 8.0)  # exponential backoff capped
                attempt += 1
        else:
            raise RuntimeError(
                f"MQTT connect failed to {host}:{port} after {max_retries} attempts: {last_err}"
            )

        self.client.loop_start()

    def publish(self, topic: str, payload, qos: int = 0, retain: bool = False):
        if not isinstance(payload, (str, bytes)):
            payload = json.dumps(payload)
        info = self.client.publish(topic, payload, qos=qos, retain=retain)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.warning(f"[MQTT] Publish to {topic} failed rc={info.rc}")
        return info

    def close(self):
        try:
            self.client.loop_stop()
        finally:
            try:
                self.client.disconnect()
            except Exception as e:
                logger.debug(f"[MQTT] Disconnect error ignored: {e}")

    # ---- callbacks ----
    def _on_connect(self, client, userdata, flags, rc, properties=None):
        if rc == 0:
            logger.info("[MQTT] Connected.")
        else:
            logger.info(f"[MQTT] Connect failed rc={rc}")

    def _on_disconnect(self, client, userdata, flags, rc, properties=None):
        logger.info(f"[MQTT] Disconnected rc={rc}")

    def _on_log(self, client, userdata, level, buf):
        if level >= mqtt.MQTT_LOG_ERR:
            logger.info(f"[MQTT] {buf}")
