"""Request/reply over a resilient connection.

Sends a numbered status request every few seconds and waits for the reply
with the same id.  Stop and restart the server to watch the client
reconnect and flush the messages it queued meanwhile.

    python examples/echo_server.py --port 7700
    python examples/client_python.py --url ws://127.0.0.1:7700
"""

import argparse
import asyncio
import json
import logging
import signal

from rws_client import UNANSWERED, connect


async def main(url: str, interval: float):
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    def on_message(event):
        try:
            reply = json.loads(event.data)
        except ValueError:
            return
        if isinstance(reply, dict) and "id" in reply:
            client.resolve(reply["id"], reply)

    async with connect(
        url,
        "Example",
        reconnect_interval=2,
        message_queueing=True,
        message_max_queue_seconds=30,
        on_open=lambda event: print(f"Connected to {event.url}"),
        on_close=lambda event: print(f"Disconnected ({event.code})"),
        on_error=lambda event: print(f"Error: {event.error.message}"),
        on_message=on_message,
    ) as client:
        while not stop.is_set():
            message_id = client.next_message_id()
            reply = await client.send_with_reply(
                {"id": message_id, "op": "status"}, message_id, timeout=1.0
            )
            if reply is UNANSWERED:
                print(f"{message_id}: no reply (queued={client.queue_size})")
            else:
                print(f"{message_id}: {reply}")
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Resilient WebSocket client example")
    parser.add_argument("--url", default="ws://127.0.0.1:7700")
    parser.add_argument("--interval", type=float, default=3.0)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    asyncio.run(main(args.url, args.interval))
