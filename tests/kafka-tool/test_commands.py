import pytest

from kafka_tool.commands import KafkaCommands
from kafka_tool.errors import CommandFailedError
from kafka_tool.reset_plan import OffsetRow

GROUPS = "/opt/kafka/bin/kafka-consumer-groups.sh"
TOPICS = "/opt/kafka/bin/kafka-topics.sh"
CONFIGS = "/opt/kafka/bin/kafka-configs.sh"
CONSUMER = "/opt/kafka/bin/kafka-console-consumer.sh"

DESCRIBE_OUTPUT = """GROUP    TOPIC   PARTITION  CURRENT-OFFSET  LOG-END-OFFSET  LAG  CONSUMER-ID  HOST  CLIENT-ID
billing  orders  0          500             650             150  -            -     -
billing  orders  1          50              90              40   -            -     -
"""


def test_list_consumer_groups_queries_zookeeper_then_broker(config, runner):
    KafkaCommands(config, runner).list_consumer_groups()
    assert runner.calls == [
        [GROUPS, "--zookeeper", "zk:2181", "--list"],
        [GROUPS, "--bootstrap-server", "broker:9092", "--list"],
    ]


def test_describe_consumer_group(config, runner):
    KafkaCommands(config, runner).describe_consumer_group("billing")
    assert runner.calls == [
        [GROUPS, "--zookeeper", "zk:2181", "--describe", "--group", "billing"],
        [GROUPS, "--bootstrap-server", "broker:9092", "--describe", "--group", "billing"],
    ]


def test_topic_commands(config, runner):
    commands = KafkaCommands(config, runner)
    commands.describe_topic("orders")
    commands.create_topic("orders", "3", "12")
    commands.delete_topic("orders")
    assert runner.calls == [
        [TOPICS, "--zookeeper", "zk:2181", "--describe", "--topic", "orders"],
        [TOPICS, "--zookeeper", "zk:2181", "--create", "--replication-factor", "3", "--partitions", "12", "--topic", "orders"],
        [TOPICS, "--zookeeper", "zk:2181", "--delete", "--topic", "orders"],
    ]


def test_create_topic_forwards_values_unvalidated(config, runner):
    KafkaCommands(config, runner).create_topic("orders", "three", "-1")
    assert runner.calls[0][-6:] == ["--replication-factor", "three", "--partitions", "-1", "--topic", "orders"]


def test_consume_commands(config, runner):
    commands = KafkaCommands(config, runner)
    commands.consume_topic("orders")
    commands.consume_topic_at("orders", "2", "1500")
    assert runner.calls == [
        [CONSUMER, "--bootstrap-server", "broker:9092", "--topic", "orders", "--from-beginning", "--timeout-ms", "2000"],
        [
            CONSUMER, "--bootstrap-server", "broker:9092", "--topic", "orders",
            "--partition", "2", "--offset", "1500", "--max-messages", "1", "--timeout-ms", "2000",
        ],
    ]


def test_retention_commands(config, runner):
    commands = KafkaCommands(config, runner)
    commands.lower_retention("orders")
    commands.restore_retention("orders")
    commands.get_offsets("orders")
    assert runner.calls == [
        [CONFIGS, "--zookeeper", "zk:2181", "--alter", "--add-config", "retention.ms=1000",
         "--entity-type", "topics", "--entity-name", "orders"],
        [CONFIGS, "--zookeeper", "zk:2181", "--alter", "--delete-config", "retention.ms",
         "--entity-type", "topics", "--entity-name", "orders"],
        ["/opt/kafka/bin/kafka-run-class.sh", "kafka.tools.GetOffsetShell",
         "--broker-list", "broker:9092", "--time", "-1", "--topic", "orders"],
    ]


def test_has_retention_override(config):
    class Runner:
        def run(self, argv, capture=False):
            return "Configs for topic 'orders' are retention.ms=1000\n"

    assert KafkaCommands(config, Runner()).has_retention_override("orders")


def test_rewind_offsets_submits_plan_and_removes_file(config, make_runner, tmp_path):
    runner = make_runner(describe_output=DESCRIBE_OUTPUT)
    plan = KafkaCommands(config, runner).rewind_offsets("orders", "billing", 100, directory=tmp_path)

    assert plan == [OffsetRow("orders", 0, 400), OffsetRow("orders", 1, -50)]
    assert runner.plans == ["orders,0,400\norders,1,-50\n"]
    reset = runner.calls[1]
    assert reset[:8] == [GROUPS, "--bootstrap-server", "broker:9092", "--reset-offsets",
                         "--group", "billing", "--topic", "orders"]
    assert reset[-1] == "--execute"
    assert list(tmp_path.iterdir()) == []


def test_rewind_offsets_removes_file_when_reset_fails(config, make_runner, tmp_path):
    runner = make_runner(describe_output=DESCRIBE_OUTPUT, fail_when=lambda argv: "--reset-offsets" in argv)
    with pytest.raises(CommandFailedError):
        KafkaCommands(config, runner).rewind_offsets("orders", "billing", 100, directory=tmp_path)
    assert list(tmp_path.iterdir()) == []


def test_rewind_offsets_without_matching_rows(config, make_runner, tmp_path):
    runner = make_runner(describe_output=DESCRIBE_OUTPUT)
    assert KafkaCommands(config, runner).rewind_offsets("payments", "billing", 10, directory=tmp_path) == []
    assert len(runner.calls) == 1


def test_retention_override_ignores_similar_config_names(config):
    class Runner:
        def run(self, argv, capture=False):
            return "Configs for topic 'orders' are cleanup.policy=compact,delete.retention.ms=86400000,local.retention.ms=-2\n"

    assert not KafkaCommands(config, Runner()).has_retention_override("orders")


def test_retention_override_in_dynamic_config_listing(config):
    class Runner:
        def run(self, argv, capture=False):
            return (
                "Dynamic configs for topic orders are:\n"
                "  retention.ms=1000 sensitive=false synonyms={DYNAMIC_TOPIC_CONFIG:retention.ms=1000}\n"
            )

    assert KafkaCommands(config, Runner()).has_retention_override("orders")
