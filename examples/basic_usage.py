"""Basic usage example for the DAppChain client."""

import asyncio
import logging
import os

from dotenv import load_dotenv
from eth_account import Account

from dappchain_client import (
    CommitError,
    DAppChainClient,
    DAppChainClientConfig,
    HttpRpcClient,
    NonceTxMiddleware,
    SignedTxMiddleware,
    TxMiddleware,
)

# Load environment variables from .env file
load_dotenv()


async def main():
    """Resolve a contract, read its state and commit a transaction."""

    private_key = os.getenv("PRIVATE_KEY")
    if not private_key:
        raise ValueError("PRIVATE_KEY not found in environment variables")

    read_url = os.getenv("DAPPCHAIN_READ_URL", "http://127.0.0.1:46658/query")
    write_url = os.getenv("DAPPCHAIN_WRITE_URL", "http://127.0.0.1:46658/rpc")

    account = Account.from_key(private_key)
    config = DAppChainClientConfig.from_env()

    async with DAppChainClient.from_config(
        HttpRpcClient(write_url), HttpRpcClient(read_url), config
    ) as client:
        # Nonce first, then sign the nonce-wrapped payload
        client.tx_middleware = TxMiddleware(
            [
                NonceTxMiddleware(account.address.lower(), client),
                SignedTxMiddleware(account),
            ]
        )

        contract = await client.resolve_contract_address(os.getenv("CONTRACT_NAME", "BluePrint"))
        print(f"Contract address: {contract}")

        state = await client.query(contract, b"", result_type=bytes)
        print(f"Raw contract state: {state.hex()}")

        try:
            result = await client.commit_tx(b"\x0a\x05hello")
        except CommitError as exc:
            print(f"Commit failed ({exc.code}): {exc.error}")
            return

        print(f"Committed tx {result.hash} at height {result.height}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
