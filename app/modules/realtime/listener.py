import asyncio
import logging
from app.platform.ports.change_feed import ChangeFeedPort
from app.modules.realtime.broker import Broker
from app.modules.realtime.messages import CHANNELS, decode

log = logging.getLogger("realtime.listener")

async def run_change_feed_listener(feed: ChangeFeedPort, broker: Broker, retry_seconds: float = 5.0):
    """Relay database change notifications into the broker until cancelled.

    Any failure drops the connection and retries after a fixed delay.
    """
    log.info("Change feed listener started with feed=%s", feed.__class__.__name__)
    try:
        while True:
            try:
                await feed.listen(CHANNELS)
                log.info("Listening on %s", ", ".join(CHANNELS))
                while True:
                    channel, payload = await feed.next()
                    broker.publish(decode(channel, payload))
            except asyncio.CancelledError:
                raise
            except Exception:
                log.exception("Change feed failed; retrying in %.1fs", retry_seconds)
                await feed.close()
                await asyncio.sleep(retry_seconds)
    except asyncio.CancelledError:
        log.info("Change feed listener cancelled; shutting down")
        raise
    finally:
        await feed.close()
