"""Custom exceptions and exit codes for the Kafka maintenance tools."""

INVALID_ARGUMENT_ERROR = 1
MISSING_ARGUMENT_ERROR = 2


class KafkaToolError(Exception):
    """Base class for errors raised by kafka_tool."""


class ConfigError(KafkaToolError):
    """Raised when a configuration value cannot be interpreted."""


class ToolNotFoundError(KafkaToolError):
    """Raised when a wrapped Kafka/Zookeeper binary cannot be executed."""


class CommandFailedError(KafkaToolError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, argv, returncode, output=None):
        self.argv = list(argv)
        self.returncode = returncode
        self.output = output
        super().__init__(f"Command exited with status {returncode}: {' '.join(self.argv)}")


class CleanerAborted(KafkaToolError):
    """Raised when the topic cleaner stops before touching any topic."""

    def __init__(self, message, exit_code=0):
        self.exit_code = exit_code
        super().__init__(message)
