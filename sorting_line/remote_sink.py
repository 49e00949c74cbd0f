"""
MQTT remote sink for processed records.

Online mode
-----------
init_remote() connects to the broker and waits for the CONNACK. A refused
or timed-out connection is not an error: the controller simply runs in
offline mode and keeps records in the local store instead.

While connected, every finished record is published as JSON on
  <mqtt.topic>      e.g. sorting/records
and the sink subscribes to the same topic, so records published by this
line (or any other line on the broker) come back through on_record. The
controller uses that feed for live analytics in online mode. Persisting the
stream is the collector's job (collector/mqtt_influx_server.py).
"""

import json
import threading

import paho.mqtt.client as mqtt

from sorting_line.models import ProcessedRecord


class RemoteSink:

    def __init__(self, mqtt_cfg, device_info=None, client_factory=None):
        """
        Parameters
        ----------
        mqtt_cfg       : dict     – 'mqtt' section of settings.json
        device_info    : dict     – 'device' section (id used for the client id)
        client_factory : callable – builds the paho client, injectable for tests
        """
        self._cfg         = mqtt_cfg or {}
        self._device_id   = (device_info or {}).get('id', 'SORTER')
        self._topic       = self._cfg.get('topic', 'sorting/records')
        self._qos         = int(self._cfg.get('qos', 1))
        self._timeout     = float(self._cfg.get('connect_timeout', 3.0))
        self._factory     = client_factory or self._make_client

        self.on_record    = None
        self._client      = None
        self._connected   = False
        self._connect_evt = threading.Event()

    def _make_client(self):
        return mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=f"sorting-line-{self._device_id}",
            clean_session=True,
        )

    # ========== LIFECYCLE ==========

    def init_remote(self, on_record=None):
        """Connect to the broker. Returns True when the line can run online."""
        self.on_record = on_record
        if not self._cfg.get('enabled', True):
            print("[MQTT] Disabled in settings – running offline")
            return False

        host = self._cfg.get('host', 'localhost')
        port = int(self._cfg.get('port', 1883))

        self._client = self._factory()
        user = self._cfg.get('username')
        if user:
            self._client.username_pw_set(user, self._cfg.get('password'))

        self._client.on_connect    = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._client.on_message    = self._on_message

        self._connect_evt.clear()
        try:
            self._client.connect(host, port, keepalive=60)
            self._client.loop_start()
        except Exception as exc:
            print(f"[MQTT] Connection failed: {exc}")
            self._client = None
            return False

        if not self._connect_evt.wait(self._timeout) or not self._connected:
            print(f"[MQTT] No broker at {host}:{port} – running offline")
            self.close()
            return False

        print(f"[MQTT] Connected to {host}:{port} ({self._topic})")
        return True

    def close(self):
        if self._client is not None:
            self._client.loop_stop()
            try:
                self._client.disconnect()
            except Exception:
                pass
            self._client = None
        self._connected = False

    # ========== MQTT CALLBACKS ==========

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            print(f"[MQTT] Connection refused ({reason_code})")
        else:
            self._connected = True
            client.subscribe(self._topic, qos=self._qos)
        self._connect_evt.set()

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self._connected = False
        if reason_code.is_failure:
            print(f"[MQTT] Unexpected disconnect ({reason_code})")

    def _on_message(self, client, userdata, msg):
        try:
            record = ProcessedRecord.from_dict(json.loads(msg.payload.decode('utf-8')))
        except Exception:
            return
        if self.on_record:
            self.on_record(record)

    # ========== PUBLISH API ==========

    def send_record(self, record):
        """Fire-and-forget publish of one finished record."""
        if not self._connected or self._client is None:
            print(f"[MQTT] Not connected – record {record.record_id} not sent")
            return
        self._client.publish(self._topic, json.dumps(record.to_dict()), qos=self._qos)

    def is_connected(self):
        return self._connected
