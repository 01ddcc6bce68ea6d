"""Follow contract events with a push-capable read client.

HttpRpcClient cannot deliver events, so this example wires in a small
in-process RPC client that replays events the way a websocket node would.
"""

import asyncio
import logging

from dappchain_client import (
    DAppChainClient,
    JsonRpcEventData,
    NetworkError,
    RawChainEvent,
    RpcClient,
    RpcConnectionState,
)


class ReplayRpcClient(RpcClient):
    """RPC client that delivers a fixed list of events to its listeners."""

    def __init__(self, events):
        self._events = events
        self._listeners = []
        self._state = RpcConnectionState.DISCONNECTED

    @property
    def connection_state(self):
        return self._state

    async def connect(self):
        self._state = RpcConnectionState.CONNECTED

    async def disconnect(self):
        self._state = RpcConnectionState.DISCONNECTED

    async def send(self, method, params):
        raise NetworkError(f"Replay client cannot send {method}", endpoint="replay")

    async def subscribe(self, listener):
        self._listeners.append(listener)

    async def unsubscribe(self, listener):
        self._listeners.remove(listener)

    def replay(self):
        for event in self._events:
            for listener in list(self._listeners):
                listener(self, event)


def on_event(source, event: RawChainEvent):
    print(f"[{event.block_height}] {event.contract_address} topics={list(event.topics)}")


async def main():
    contract = "default:0x" + "11" * 20
    rpc = ReplayRpcClient(
        [
            JsonRpcEventData(
                contract_address=contract,
                caller_address="default:0x" + "22" * 20,
                block_height=str(height),
                data=b"\x01",
                topics=["event:Transfer"],
            )
            for height in (10, 11, 12)
        ]
    )
    client = DAppChainClient(None, rpc)

    client.chain_event_received += on_event
    await client.chain_event_received.drain()

    rpc.replay()

    await client.unsubscribe_chain_events(on_event)
    await client.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    asyncio.run(main())
