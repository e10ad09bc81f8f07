"""
Topic cleaner workflow.

Emptying a topic is done by lowering its retention so the brokers delete
every segment, then removing the override again:

    IDLE -> CONFIRMING -> LOWERING_RETENTION -> WAITING_LOWERED
         -> RESTORING_RETENTION -> WAITING_RESTORED -> REPORTING -> DONE

ABORTED is reached when no topic is given or the confirmation is declined.

If the run fails or is interrupted while any topic still carries the
lowered retention, the cleaner restores retention for those topics before
re-raising. Removing the override is idempotent, so running the whole
workflow again is always a valid way to finish an incomplete run.
"""

import logging
import threading
import time
from enum import Enum
from functools import partial

from kafka_tool.errors import MISSING_ARGUMENT_ERROR, CleanerAborted, KafkaToolError
from kafka_tool.kafka_utils import is_topic_empty

logger = logging.getLogger(__name__)

PROGNAME = "Kafka Topic Cleaner"
PROGVERSION = "v2.3"

MIN_POLL_INTERVAL = 0.1


class CleanerState(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    LOWERING_RETENTION = "lowering-retention"
    WAITING_LOWERED = "waiting-lowered"
    RESTORING_RETENTION = "restoring-retention"
    WAITING_RESTORED = "waiting-restored"
    REPORTING = "reporting"
    DONE = "done"
    ABORTED = "aborted"


class Waiter:
    """
    Bounded, cancellable wait that can finish early on a condition.

    ``wait()`` without a condition blocks for the whole timeout. With a
    condition it polls every ``poll_interval`` seconds and returns True as
    soon as the condition holds, or False once the timeout expires or the
    wait is cancelled. A cancel ends only the current or next wait.
    """

    def __init__(self, timeout, poll_interval):
        self.timeout = timeout
        self.poll_interval = max(poll_interval, MIN_POLL_INTERVAL)
        self._cancelled = threading.Event()

    def cancel(self):
        self._cancelled.set()

    def _check(self, condition):
        try:
            return bool(condition())
        except Exception as e:
            logger.warning(f"Condition check failed, retrying: {e}")
            return False

    def wait(self, condition=None):
        logger.info(f"Waiting up to {self.timeout:g} seconds to allow configuration change to be applied.")
        deadline = time.monotonic() + self.timeout
        while True:
            if condition is not None and self._check(condition):
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return condition is None
            pause = remaining if condition is None else min(self.poll_interval, remaining)
            if self._cancelled.wait(pause):
                self._cancelled.clear()
                logger.warning("Wait cancelled.")
                return False


class TopicCleaner:
    def __init__(self, commands, waiter=None, probe=None, ask=input):
        config = commands.config
        self.commands = commands
        self.waiter = waiter or Waiter(config.timeout, config.poll_interval)
        self.probe = probe or partial(is_topic_empty, config.broker)
        self.ask = ask
        self.state = CleanerState.IDLE

    def _enter(self, state):
        logger.debug(f"Cleaner state: {self.state.value} -> {state.value}")
        self.state = state

    def _confirm(self):
        print("WARNING: Emptying a topic is irreversible. ")
        try:
            answer = self.ask("Are you sure that you want to proceed? [y/n]: ")
        except EOFError:
            answer = ""
        return answer.strip() == "y"

    def _all_empty(self, topic_names):
        return all(self.probe(topic_name) for topic_name in topic_names)

    def _none_overridden(self, topic_names):
        return not any(self.commands.has_retention_override(topic_name) for topic_name in topic_names)

    def _recover(self, lowered):
        logger.error(f"Cleaner stopped in state '{self.state.value}', restoring retention for: {', '.join(lowered)}")
        for topic_name in lowered:
            try:
                self.commands.restore_retention(topic_name)
            except KafkaToolError as e:
                logger.error(f"Could not restore retention for {topic_name}, re-run the cleaner: {e}")

    def run(self, topic_names, force=False):
        """Empty every topic in ``topic_names`` and return the final state."""
        self.state = CleanerState.IDLE
        topic_names = list(topic_names)
        if not topic_names:
            self._enter(CleanerState.ABORTED)
            raise CleanerAborted("A minimum of one TOPIC_NAME is required", MISSING_ARGUMENT_ERROR)

        config = self.commands.config
        print(PROGNAME)
        print("")
        print(f"Zookeeper: {config.zookeeper}")
        print(f"Kafka Broker: {config.broker}")
        print(f"Topic(s): {' '.join(topic_names)}")

        if not force:
            self._enter(CleanerState.CONFIRMING)
            if not self._confirm():
                print("Cancelled.")
                self._enter(CleanerState.ABORTED)
                return self.state

        lowered = []
        try:
            self._enter(CleanerState.LOWERING_RETENTION)
            logger.info("Starting cleaning.")
            for topic_name in topic_names:
                lowered.append(topic_name)
                self.commands.lower_retention(topic_name)

            self._enter(CleanerState.WAITING_LOWERED)
            if not self.waiter.wait(partial(self._all_empty, topic_names)):
                logger.warning("Topics not confirmed empty before the timeout, restoring retention anyway.")
            logger.info("Cleaning completed.")

            self._enter(CleanerState.RESTORING_RETENTION)
            logger.info("Restoring configuration.")
            for topic_name in topic_names:
                self.commands.restore_retention(topic_name)
                lowered.remove(topic_name)
        except (Exception, KeyboardInterrupt):
            if lowered:
                self._recover(lowered)
            raise

        self._enter(CleanerState.WAITING_RESTORED)
        if not self.waiter.wait(partial(self._none_overridden, topic_names)):
            logger.warning("Retention overrides still visible after the timeout.")

        self._enter(CleanerState.REPORTING)
        print("Topic count and offset: ")
        for topic_name in topic_names:
            self.commands.get_offsets(topic_name)

        self._enter(CleanerState.DONE)
        print("Done.")
        return self.state
