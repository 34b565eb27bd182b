"""Health tracking for the upstream news API."""

import logging
from typing import Any, Dict

log = logging.getLogger("newsportal.monitoring")


class UpstreamHealth:
    """Tracks consecutive upstream failures and raises a one-shot alert at a threshold."""

    def __init__(self, alert_threshold: int = 5):
        self.alert_threshold = alert_threshold
        self._consecutive_failures = 0
        self._alerted = False
        self._last_reason: str = ""

    def record_success(self) -> None:
        if self._consecutive_failures > 0:
            log.info("NewsAPI recovered after %d consecutive failure(s).", self._consecutive_failures)
        self._consecutive_failures = 0
        self._alerted = False
        self._last_reason = ""

    def record_failure(self, reason: str = "") -> bool:
        """Record a failure. Returns True if the alert threshold was just crossed."""
        self._consecutive_failures += 1
        self._last_reason = reason
        log.warning("NewsAPI failure #%d in a row: %s", self._consecutive_failures, reason)

        if self._consecutive_failures >= self.alert_threshold and not self._alerted:
            self._alerted = True
            log.error("ALERT: NewsAPI failed %d times in a row, serving demo data.",
                      self._consecutive_failures)
            return True
        return False

    @property
    def failures(self) -> int:
        return self._consecutive_failures

    @property
    def is_online(self) -> bool:
        return self._consecutive_failures == 0

    def get_status(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "status": "online" if self.is_online else "offline",
            "consecutiveFailures": self._consecutive_failures,
        }
        if self._last_reason:
            out["lastError"] = self._last_reason
        return out
