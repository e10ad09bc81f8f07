import argparse
import logging
import os
import sys

from kafka_tool.cleaner import TopicCleaner
from kafka_tool.commands import KafkaCommands
from kafka_tool.env_loader import load_config
from kafka_tool.errors import INVALID_ARGUMENT_ERROR, CommandFailedError, KafkaToolError

PROGNAME = "Kafka Tool"
PROGVERSION = "v1.3"

logger = logging.getLogger("kafka-tool")


def usage(prog):
    return f"""
NAME
    {PROGNAME} {PROGVERSION} -- Query Kafka/Zookeeper data and metadata

SYNOPSIS
    {prog} -l
    {prog} -g CONSUMER_GROUP_NAME
    {prog} -t TOPIC_NAME
    {prog} -c TOPIC_NAME
    {prog} -m TOPIC_NAME PARTITION OFFSET
    {prog} -n TOPIC_NAME NUMBER_OF_REPLICAS NUMBER_OF_PARTITIONS
    {prog} -p TOPIC_NAME
    {prog} -r TOPIC_NAME CONSUMER_GROUP_NAME DELTA_OFFSET
    {prog} -d TOPIC_NAME

DESCRIPTION
    This tool runs queries to retrieve data and metadata from Kafka & Zookeeper.

OPTIONS
    The following options are available:
    -l      List consumer groups
    -g      Describe a specific consumer group, including current lag
    -t      Describe a specific topic
    -c, -a  Consume all messages from a specific topic
    -m      Consume the message from the specified topic, at the specified partition and offset
    -n      Create a new topic
    -p      Purge/empty a topic (without deleting it)
    -r      Rewind the topic offsets of a consumer group by the specified number
    -d      Delete a specific topic
    -h      Print this help message and exit.

EXAMPLES
    {prog} -l
    {prog} -g my_group_name
    {prog} -r my_topic my_group_name 100

CONFIGURATION
    This tool relies on kafka_tool.cfg for environment configuration.
"""


class _Parser(argparse.ArgumentParser):
    def format_usage(self):
        return usage(self.prog)

    format_help = format_usage

    def error(self, message):
        sys.stderr.write(f"{self.prog}: {message}\n")
        self.print_usage(sys.stderr)
        sys.exit(INVALID_ARGUMENT_ERROR)


class _Dispatch(argparse.Action):
    """Queue ``(handler, values)`` so flags run in command-line order."""

    def __call__(self, parser, namespace, values, option_string=None):
        queued = list(getattr(namespace, self.dest) or [])
        queued.append((self.const, list(values or [])))
        setattr(namespace, self.dest, queued)


def build_parser():
    parser = _Parser(prog="kafka-tool", add_help=False)
    flags = [
        (["-l"], "list_consumer_groups", 0, None),
        (["-g"], "describe_consumer_group", 1, "CONSUMER_GROUP_NAME"),
        (["-t"], "describe_topic", 1, "TOPIC_NAME"),
        (["-c", "-a"], "consume_topic", 1, "TOPIC_NAME"),
        (["-m"], "consume_topic_at", 3, ("TOPIC_NAME", "PARTITION", "OFFSET")),
        (["-n"], "create_topic", 3, ("TOPIC_NAME", "NUMBER_OF_REPLICAS", "NUMBER_OF_PARTITIONS")),
        (["-p"], "purge_topic", 1, "TOPIC_NAME"),
        (["-r"], "rewind_offsets", 3, ("TOPIC_NAME", "CONSUMER_GROUP_NAME", "DELTA_OFFSET")),
        (["-d"], "delete_topic", 1, "TOPIC_NAME"),
        (["-h"], "usage", 0, None),
    ]
    for options, handler, nargs, metavar in flags:
        parser.add_argument(
            *options, dest="commands", action=_Dispatch, const=handler, nargs=nargs, metavar=metavar
        )
    return parser


# ----------------------------------------
# Handlers
# ----------------------------------------
def purge_topic(commands, topic_name):
    TopicCleaner(commands).run([topic_name])


def rewind_offsets(commands, topic_name, group_name, delta_offset):
    try:
        delta = int(delta_offset)
    except ValueError as e:
        raise KafkaToolError(f"DELTA_OFFSET must be an integer, got {delta_offset!r}") from e
    commands.rewind_offsets(topic_name, group_name, delta)


HANDLERS = {
    "list_consumer_groups": KafkaCommands.list_consumer_groups,
    "describe_consumer_group": KafkaCommands.describe_consumer_group,
    "describe_topic": KafkaCommands.describe_topic,
    "consume_topic": KafkaCommands.consume_topic,
    "consume_topic_at": KafkaCommands.consume_topic_at,
    "create_topic": KafkaCommands.create_topic,
    "purge_topic": purge_topic,
    "rewind_offsets": rewind_offsets,
    "delete_topic": KafkaCommands.delete_topic,
}


def main(argv=None, config=None, runner=None):
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        commands = KafkaCommands(config or load_config(), runner)
        for handler, values in args.commands or []:
            if handler == "usage":
                print(usage(parser.prog))
                continue
            HANDLERS[handler](commands, *values)
    except CommandFailedError as e:
        logger.error(f"❌ {e}")
        return e.returncode
    except KafkaToolError as e:
        logger.error(f"❌ {e}")
        return INVALID_ARGUMENT_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
