import argparse
import logging
import os
import sys

from kafka_tool.cleaner import PROGNAME, PROGVERSION, TopicCleaner
from kafka_tool.commands import KafkaCommands
from kafka_tool.env_loader import load_config
from kafka_tool.errors import (
    INVALID_ARGUMENT_ERROR,
    CleanerAborted,
    CommandFailedError,
    KafkaToolError,
)

logger = logging.getLogger("empty-topic")


def usage(prog):
    return f"""
NAME
    {PROGNAME} {PROGVERSION} -- Empty the contents of one or more Kafka topics

SYNOPSIS
    {prog} [-f] -t TOPIC_NAME_1 [-t TOPIC_NAME_N]

OPTIONS
    The following options are available:
    -t      Topic name
    -f      Force run without prompting for confirmation
    -h      Print this help message and exit.

EXAMPLES
    {prog} -t "test-topic"
    {prog} -t "test-topic-1" -t "test-topic-2" -t "test-topic-3"

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


def build_parser():
    parser = _Parser(prog="empty-topic")
    parser.add_argument("-t", dest="topic_names", action="append", default=[], metavar="TOPIC_NAME")
    parser.add_argument("-f", dest="force", action="store_true")
    return parser


def main(argv=None, config=None, runner=None, cleaner_factory=TopicCleaner):
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        commands = KafkaCommands(config or load_config(), runner)
        cleaner_factory(commands).run(args.topic_names, force=args.force)
    except CleanerAborted as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return e.exit_code
    except CommandFailedError as e:
        logger.error(f"❌ {e}")
        return e.returncode
    except KafkaToolError as e:
        logger.error(f"❌ {e}")
        return INVALID_ARGUMENT_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
