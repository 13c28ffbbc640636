"""Minimal JSON echo server for trying the client.

Every text frame is parsed as JSON and sent back with ``"echo": true``
added, so ``id`` fields come back unchanged.

    python examples/echo_server.py --port 7700
"""

import argparse
import asyncio
import json

from websockets.asyncio.server import serve


async def echo(ws):
    async for message in ws:
        try:
            data = json.loads(message)
        except ValueError:
            await ws.send(message)
            continue
        if isinstance(data, dict):
            data["echo"] = True
        await ws.send(json.dumps(data))


async def main(host: str, port: int):
    async with serve(echo, host, port) as server:
        print(f"Echo server on ws://{host}:{port}")
        await server.serve_forever()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="JSON echo server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=7700)
    args = parser.parse_args()
    asyncio.run(main(args.host, args.port))
