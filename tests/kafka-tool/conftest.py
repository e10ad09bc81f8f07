from pathlib import Path

import pytest

from kafka_tool.env_loader import KafkaToolConfig
from kafka_tool.errors import CommandFailedError


class FakeRunner:
    """Records argument vectors instead of spawning the Kafka scripts."""

    def __init__(self, describe_output="", fail_when=None, returncode=1):
        self.calls = []
        self.plans = []
        self.describe_output = describe_output
        self.fail_when = fail_when
        self.returncode = returncode

    def run(self, argv, capture=False):
        argv = [str(arg) for arg in argv]
        self.calls.append(argv)
        if "--from-file" in argv:
            self.plans.append(Path(argv[argv.index("--from-file") + 1]).read_text())
        if self.fail_when is not None and self.fail_when(argv):
            raise CommandFailedError(argv, self.returncode)
        if capture and "--describe" in argv and argv[0].endswith("kafka-consumer-groups.sh"):
            return self.describe_output
        return ""


@pytest.fixture
def config():
    return KafkaToolConfig(
        broker="broker:9092",
        zookeeper="zk:2181",
        kafka_dir="/opt/kafka/bin",
        zookeeper_dir="/opt/zookeeper/bin",
        timeout=0,
        poll_interval=0,
    )


@pytest.fixture
def make_runner():
    return FakeRunner


@pytest.fixture
def runner():
    return FakeRunner()
