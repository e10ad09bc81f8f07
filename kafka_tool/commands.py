"""Invocations of the Kafka administrative scripts."""

import logging
import re

from kafka_tool.reset_plan import compute_reset_plan, parse_group_offsets, reset_plan_file
from kafka_tool.shell import CommandRunner

logger = logging.getLogger(__name__)

CONSUMER_TIMEOUT_MS = 2000
PURGE_RETENTION_MS = 1000


class KafkaCommands:
    """
    One method per maintenance operation.

    Each method builds the argument vector for a Kafka script from the
    loaded configuration and hands it to the runner. Argument values are
    forwarded unchanged; the scripts reject anything malformed.
    """

    def __init__(self, config, runner=None):
        self.config = config
        self.runner = runner or CommandRunner()

    def _consumer_groups(self, *args, capture=False):
        return self.runner.run([self.config.kafka_bin("kafka-consumer-groups.sh"), *args], capture=capture)

    def _topics(self, *args):
        return self.runner.run([self.config.kafka_bin("kafka-topics.sh"), "--zookeeper", self.config.zookeeper, *args])

    def _topic_configs(self, topic, *args, capture=False):
        return self.runner.run(
            [
                self.config.kafka_bin("kafka-configs.sh"),
                "--zookeeper", self.config.zookeeper,
                *args,
                "--entity-type", "topics",
                "--entity-name", topic,
            ],
            capture=capture,
        )

    def _console_consumer(self, topic, *args):
        return self.runner.run(
            [
                self.config.kafka_bin("kafka-console-consumer.sh"),
                "--bootstrap-server", self.config.broker,
                "--topic", topic,
                *args,
                "--timeout-ms", CONSUMER_TIMEOUT_MS,
            ]
        )

    # ----------------------------------------
    # Consumer groups
    # ----------------------------------------
    def list_consumer_groups(self):
        logger.info("Querying old consumers: ")
        self._consumer_groups("--zookeeper", self.config.zookeeper, "--list")
        logger.info("Querying new consumers: ")
        self._consumer_groups("--bootstrap-server", self.config.broker, "--list")

    def describe_consumer_group(self, group_name):
        logger.info("Querying old consumers: ")
        self._consumer_groups("--zookeeper", self.config.zookeeper, "--describe", "--group", group_name)
        logger.info("Querying new consumers: ")
        self._consumer_groups("--bootstrap-server", self.config.broker, "--describe", "--group", group_name)

    def rewind_offsets(self, topic_name, group_name, delta_offset, directory="."):
        """
        Move the group's committed offsets on ``topic_name`` back by
        ``delta_offset`` messages on every partition.

        Returns the reset plan that was submitted.
        """
        output = self._consumer_groups(
            "--bootstrap-server", self.config.broker, "--describe", "--group", group_name, capture=True
        )
        plan = compute_reset_plan(parse_group_offsets(output, topic_name), delta_offset)
        if not plan:
            logger.warning(f"No committed offsets found for group {group_name} on topic {topic_name}")
            return plan

        with reset_plan_file(plan, directory) as path:
            self._consumer_groups(
                "--bootstrap-server", self.config.broker,
                "--reset-offsets",
                "--group", group_name,
                "--topic", topic_name,
                "--from-file", path,
                "--execute",
            )
        return plan

    # ----------------------------------------
    # Topics
    # ----------------------------------------
    def describe_topic(self, topic_name):
        self._topics("--describe", "--topic", topic_name)

    def create_topic(self, topic_name, replicas, partitions):
        self._topics(
            "--create",
            "--replication-factor", replicas,
            "--partitions", partitions,
            "--topic", topic_name,
        )

    def delete_topic(self, topic_name):
        self._topics("--delete", "--topic", topic_name)

    def consume_topic(self, topic_name):
        self._console_consumer(topic_name, "--from-beginning")

    def consume_topic_at(self, topic_name, partition, offset):
        self._console_consumer(
            topic_name,
            "--partition", partition,
            "--offset", offset,
            "--max-messages", 1,
        )

    # ----------------------------------------
    # Retention and offsets, used by the topic cleaner
    # ----------------------------------------
    def lower_retention(self, topic_name):
        self._topic_configs(topic_name, "--alter", "--add-config", f"retention.ms={PURGE_RETENTION_MS}")

    def restore_retention(self, topic_name):
        self._topic_configs(topic_name, "--alter", "--delete-config", "retention.ms")

    def has_retention_override(self, topic_name):
        output = self._topic_configs(topic_name, "--describe", capture=True)
        entries = (entry.split("=", 1)[0] for entry in re.split(r"[,\s]+", output) if "=" in entry)
        return "retention.ms" in entries

    def get_offsets(self, topic_name):
        self.runner.run(
            [
                self.config.kafka_bin("kafka-run-class.sh"),
                "kafka.tools.GetOffsetShell",
                "--broker-list", self.config.broker,
                "--time", -1,
                "--topic", topic_name,
            ]
        )
