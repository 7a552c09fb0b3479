"""
Telemetry Sinks - where per-frame detection records go.

Sinks are registered by type name and built from each camera's
`telemetry` config list:

    telemetry:
      - type: jsonl
        path: data/front.jsonl
      - type: webhook
        url: http://10.10.89.2:5800/vision/front
      - type: log

Every sink is fire-and-forget: a failed send is logged and dropped so a
flaky consumer never stalls the camera loop.
"""

import json
import logging
import os
from typing import Any, Callable

import requests

from ..utils.constants import DEFAULT_WEBHOOK_TIMEOUT

logger = logging.getLogger(__name__)

# Registry: sink type -> sink class
SINK_REGISTRY: dict[str, type] = {}


def register(sink_type: str):
    """Decorator to register a telemetry sink class for a type name."""

    def decorator(cls):
        SINK_REGISTRY[sink_type] = cls
        return cls

    return decorator


class TelemetryFanout:
    """Publishes each record to several sinks; one failing sink never blocks the rest."""

    def __init__(self, sinks: list):
        self.sinks = sinks
        # Consecutive publish failures per sink
        self.failures = [0] * len(sinks)

    def publish(self, values: dict[str, Any]) -> None:
        for index, sink in enumerate(self.sinks):
            try:
                sink.publish(values)
            except Exception as e:
                self._record_failure(index, sink, e)
            else:
                self.failures[index] = 0

    def _record_failure(self, index: int, sink, error: Exception) -> None:
        self.failures[index] += 1
        name = type(sink).__name__
        if self.failures[index] == 1:
            logger.warning(f"Telemetry sink {name} failed, dropping record: {error}")
        else:
            logger.debug(f"Telemetry sink {name} failed ({self.failures[index]}): {error}")

    def close(self) -> None:
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                logger.error(f"Failed to close telemetry sink {type(sink).__name__}: {e}")


def build_telemetry_sink(camera_name: str, sink_configs: list[dict]) -> TelemetryFanout:
    """
    Build the telemetry sinks configured for one camera.

    Args:
        camera_name: Camera the records belong to
        sink_configs: List of {"type": ..., **options}

    Returns:
        TelemetryFanout over every known sink type (unknown types are skipped)
    """
    sinks = []
    for sink_config in sink_configs:
        sink_type = sink_config.get("type")
        if sink_type not in SINK_REGISTRY:
            logger.warning(f"{camera_name}: no telemetry sink registered for type: {sink_type}")
            continue

        try:
            sink = SINK_REGISTRY[sink_type](camera_name, sink_config)
        except Exception:
            TelemetryFanout(sinks).close()
            raise
        sinks.append(sink)
        logger.info(f"{camera_name}: telemetry -> {sink_type}")

    if not sinks:
        logger.warning(f"{camera_name}: no telemetry sinks configured")

    return TelemetryFanout(sinks)


class CallbackTelemetrySink:
    """
    Adapter that wraps a callback function as a TelemetrySink.

    Example:
        table = {}
        sink = CallbackTelemetrySink(table.update)
    """

    def __init__(self, callback: Callable[[dict[str, Any]], None]):
        self._callback = callback

    def publish(self, values: dict[str, Any]) -> None:
        self._callback(values)

    def close(self) -> None:
        pass


@register("log")
class LogTelemetrySink:
    """Logs records - detections at INFO, misses at DEBUG."""

    def __init__(self, camera_name: str, config: dict[str, Any]):
        self.camera_name = camera_name
        self._logger = logging.getLogger(f"{__name__}.{camera_name}")

    def publish(self, values: dict[str, Any]) -> None:
        if values["seeTarget"]:
            self._logger.info(
                f"target center={values['center']} "
                f"size={values['targetWidth']}x{values['targetHeight']} "
                f"({values['deltaTime']:.1f} ms)"
            )
        else:
            self._logger.debug("no target")

    def close(self) -> None:
        pass


@register("jsonl")
class JsonlTelemetrySink:
    """Appends one JSON object per frame to a file."""

    def __init__(self, camera_name: str, config: dict[str, Any]):
        self.camera_name = camera_name
        self.path = config.get("path", os.path.join("data", f"{camera_name}.jsonl"))

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._file = open(self.path, "a", encoding="utf-8")
        logger.info(f"{camera_name}: JSONL telemetry: {self.path}")

    def publish(self, values: dict[str, Any]) -> None:
        record = {"camera": self.camera_name, **values}
        self._file.write(json.dumps(record) + "\n")
        self._file.flush()

    def close(self) -> None:
        self._file.close()


@register("webhook")
class WebhookTelemetrySink:
    """
    POSTs each record as JSON to an HTTP endpoint.

    Config options:
        url: Endpoint URL (required)
        timeout_seconds: Request timeout (default 0.5)
        only_targets: Skip frames without a target (default False)
    """

    def __init__(self, camera_name: str, config: dict[str, Any]):
        self.camera_name = camera_name
        self._url = config["url"]
        self._timeout = config.get("timeout_seconds", DEFAULT_WEBHOOK_TIMEOUT)
        self._only_targets = config.get("only_targets", False)
        self._session = requests.Session()
        self.failures = 0

        logger.debug(f"WebhookTelemetrySink initialized: {camera_name} -> {self._url}")

    def publish(self, values: dict[str, Any]) -> None:
        if self._only_targets and not values["seeTarget"]:
            return

        try:
            response = self._session.post(
                self._url,
                json={"camera": self.camera_name, **values},
                timeout=self._timeout,
            )
            if not response.ok:
                self._record_failure(f"{response.status_code} {response.text[:100]}")
            else:
                self.failures = 0
        except requests.RequestException as e:
            self._record_failure(str(e))

    def _record_failure(self, reason: str) -> None:
        self.failures += 1
        # Warn on the first failure of a run of failures only
        if self.failures == 1:
            logger.warning(f"{self.camera_name}: telemetry webhook failed: {reason}")
        else:
            logger.debug(f"{self.camera_name}: telemetry webhook failed: {reason}")

    def close(self) -> None:
        self._session.close()
