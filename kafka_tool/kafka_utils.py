import logging
import time

from kafka import KafkaConsumer
from kafka.errors import NoBrokersAvailable
from kafka.structs import TopicPartition

logger = logging.getLogger(__name__)


def connect_with_retry(factory, retries=3, base_delay=1):
    for i in range(retries):
        try:
            return factory()
        except NoBrokersAvailable as e:
            logger.warning(f"Attempt {i + 1}: No brokers available - {e}")
            if i + 1 < retries:
                time.sleep(base_delay * (2 ** i))
    raise NoBrokersAvailable("All attempts to connect to Kafka failed.")


def topic_offset_ranges(broker, topic):
    """
    Return ``{partition: (earliest, latest)}`` for every partition of ``topic``.

    Opens a group-less consumer, so no offsets are committed.
    """
    consumer = connect_with_retry(
        lambda: KafkaConsumer(bootstrap_servers=broker, enable_auto_commit=False, client_id="kafka-tool-probe")
    )
    try:
        partitions = consumer.partitions_for_topic(topic) or set()
        tps = [TopicPartition(topic, p) for p in sorted(partitions)]
        if not tps:
            return {}
        earliest = consumer.beginning_offsets(tps)
        latest = consumer.end_offsets(tps)
        return {tp.partition: (earliest.get(tp, 0), latest.get(tp, 0)) for tp in tps}
    finally:
        consumer.close()


def is_topic_empty(broker, topic):
    """True when no partition of ``topic`` still holds a message."""
    ranges = topic_offset_ranges(broker, topic)
    for partition, (earliest, latest) in ranges.items():
        if earliest < latest:
            logger.debug(f"{topic}:{partition} still holds {latest - earliest} message(s)")
            return False
    return True
