import structlog
from google.api_core import exceptions
from google.cloud import pubsub_v1

from build_status_relay.publisher import DELIVERY_FAILED

log = structlog.get_logger(__name__)


def ensure_subscription(subscriber, project_id, topic, subscription):
    """Create the subscription on ``topic``, or reuse it if it already exists."""

    path = subscriber.subscription_path(project_id, subscription)
    topic_path = pubsub_v1.PublisherClient.topic_path(project_id, topic)

    try:
        subscriber.create_subscription(request={'name': path, 'topic': topic_path})
    except exceptions.AlreadyExists:
        log.info('subscription already exists', subscription=subscription, topic=topic)
    else:
        log.info('created subscription', subscription=subscription, topic=topic)

    return path


def callback(publisher, policy='ack'):
    def receive(message):
        try:
            outcome = publisher.handle(message.data)
        except Exception:
            log.exception('unexpected error handling build update', message_id=message.message_id)
            outcome = None

        if outcome == DELIVERY_FAILED and policy == 'nack':
            message.nack()
        else:
            message.ack()

    return receive


def run(config, publisher, subscriber=None):
    if subscriber is None:
        subscriber = pubsub_v1.SubscriberClient()

    with subscriber:
        path = ensure_subscription(
                subscriber, config.project_id, config.build_topic, config.subscription)

        future = subscriber.subscribe(
                path,
                callback=callback(publisher, config.delivery_failure_policy),
                flow_control=pubsub_v1.types.FlowControl(
                    max_messages=config.max_concurrent_messages))

        log.info('listening for build updates', subscription=path)
        try:
            future.result()
        except KeyboardInterrupt:
            future.cancel()
            future.result()
