"""Collector - subscribes to the record topic and writes every record to InfluxDB"""

import json

import paho.mqtt.client as mqtt
from influxdb_client import InfluxDBClient, Point, WriteOptions

from sorting_line.models import ProcessedRecord
from sorting_line.settings import load_settings

MEASUREMENT = "sorting"


def record_to_point(record):
    """Map one ProcessedRecord onto an InfluxDB point (ms precision)."""
    return Point(MEASUREMENT)\
        .tag("device", record.device)\
        .tag("category", record.category)\
        .tag("sorted_to", record.sorted_to)\
        .tag("correct", str(record.is_correct).lower())\
        .field("is_correct", 1 if record.is_correct else 0)\
        .field("fault_injected", 1 if record.fault_injected else 0)\
        .field("item_name", record.item_name)\
        .field("record_id", record.record_id)\
        .time(record.timestamp * 1_000_000)


def parse_records(payload):
    """Decode one MQTT payload into records; anything malformed is dropped."""
    try:
        data = json.loads(payload)
    except ValueError:
        return []

    items = data.get("items") if isinstance(data, dict) and data.get("batch") else [data]
    records = []
    for item in items or []:
        try:
            records.append(ProcessedRecord.from_dict(item))
        except (KeyError, TypeError, ValueError):
            continue
    return records


def main():
    all_settings = load_settings()
    mqtt_cfg = all_settings.get("mqtt", {})
    influx_cfg = all_settings.get("influx", {})

    host = mqtt_cfg.get("host", "localhost")
    port = int(mqtt_cfg.get("port", 1883))
    username = mqtt_cfg.get("username")
    password = mqtt_cfg.get("password")
    topic = mqtt_cfg.get("topic", "sorting/records")

    url = influx_cfg.get("url", "http://localhost:8086")
    token = influx_cfg.get("token", "")
    org = influx_cfg.get("org", "sorting-line")
    bucket = influx_cfg.get("bucket", "sorting")

    client = InfluxDBClient(url=url, token=token, org=org)
    write_api = client.write_api(write_options=WriteOptions(batch_size=500, flush_interval=1000))

    def on_connect(client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            print(f"[SERVER] MQTT connection failed: {reason_code}")
        else:
            print("[SERVER] MQTT connected")
            client.subscribe(topic)

    def on_message(client, userdata, msg):
        records = parse_records(msg.payload.decode("utf-8", errors="replace"))
        if records:
            write_api.write(bucket=bucket, org=org, record=[record_to_point(r) for r in records])

    mqtt_client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
    if username:
        mqtt_client.username_pw_set(username, password)

    mqtt_client.on_connect = on_connect
    mqtt_client.on_message = on_message

    mqtt_client.connect(host, port, 60)
    print(f"[SERVER] Listening for records on {topic}...")
    try:
        mqtt_client.loop_forever()
    except KeyboardInterrupt:
        pass
    finally:
        mqtt_client.disconnect()
        write_api.flush()
        client.close()


if __name__ == "__main__":
    main()
