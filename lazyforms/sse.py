import json
import logging
import queue
from threading import Lock

logger = logging.getLogger(__name__)


def format_sse(data, event=None):
    """Formats a payload as a Server-Sent Events message.

    Args:
        data: A JSON-serializable payload.
        event (str, optional): The SSE event name.

    Returns:
        str: The wire-format message.
    """
    msg = f"data: {json.dumps(data)}\n\n"
    if event is not None:
        msg = f"event: {event}\n{msg}"
    return msg


class MessageAnnouncer:
    """Pushes resolver updates to every connected extension view.

    Each listener (background worker, side panel) gets its own bounded queue.
    A slow listener loses messages instead of stalling the resolver; every
    update is a full replacement, so the next message repairs the gap.
    """

    def __init__(self):
        """Initializes the MessageAnnouncer."""
        self.listeners = []
        self.lock = Lock()

    def listen(self):
        """Yields messages for one connected client until it disconnects.

        Yields:
            str: A message from the queue, formatted for SSE.
        """
        q = queue.Queue(maxsize=20)
        with self.lock:
            self.listeners.append(q)

        try:
            while True:
                try:
                    # The timeout gives the generator a yield point so that
                    # GeneratorExit is raised promptly on disconnect.
                    msg = q.get(timeout=1.0)
                    yield msg
                except queue.Empty:
                    yield ": heartbeat\n\n"
        finally:
            with self.lock:
                try:
                    self.listeners.remove(q)
                except ValueError:
                    # Already removed
                    pass

    def announce(self, msg):
        """Announces a raw SSE message to all listening clients.

        Args:
            msg (str): The message to announce.
        """
        with self.lock:
            current_listeners = list(self.listeners)

        for q in current_listeners:
            try:
                q.put_nowait(msg)
            except queue.Full:
                logger.warning(
                    "A client's SSE message queue was full. Dropping message."
                )

    def publish(self, event, data):
        """Formats ``data`` as a named SSE event and announces it.

        Args:
            event (str): The event name, e.g. ``quickSlots``.
            data: A JSON-serializable payload.
        """
        self.announce(format_sse(data, event=event))


announcer = MessageAnnouncer()
