"""Transaction commit pipeline for the DAppChain client."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from ..constants import (
    DEFAULT_COMMIT_TIMEOUT,
    NONCE_CONFLICT_CODE,
    NONCE_CONFLICT_ERROR,
    RpcMethod,
)
from ..exceptions import (
    CommitTimeoutError,
    InvalidTxNonceError,
    NotConfiguredError,
    TxCommitError,
)
from ..types import BroadcastTxResult
from ..utils import serialize_message, to_base64

if TYPE_CHECKING:  # pragma: no cover - import-time only
    from .client import DAppChainClient


def check_commit_result(result: BroadcastTxResult) -> BroadcastTxResult:
    """Raise if either stage failed, distinguishing nonce conflicts."""

    check_tx = result.check_tx
    if not check_tx.ok:
        if check_tx.is_nonce_conflict:
            raise InvalidTxNonceError(check_tx.code, check_tx.error)
        raise TxCommitError("check_tx", check_tx.code, check_tx.error)

    deliver_tx = result.deliver_tx
    if not deliver_tx.ok:
        raise TxCommitError("deliver_tx", deliver_tx.code, deliver_tx.error)

    return result


class TransactionCommitter:
    """Serialize, sign and broadcast transactions with bounded nonce retries."""

    def __init__(self, client: DAppChainClient) -> None:
        self._client = client
        self._abandoned: set[asyncio.Future[BroadcastTxResult]] = set()

    @property
    def abandoned(self) -> frozenset[asyncio.Future[BroadcastTxResult]]:
        """Attempts that lost their timeout race and are still running."""
        return frozenset(self._abandoned)

    async def commit(
        self, tx: Any, timeout: float = DEFAULT_COMMIT_TIMEOUT
    ) -> BroadcastTxResult:
        """Commit ``tx`` and return the broadcast result.

        Each attempt is raced against ``timeout``. A nonce conflict is retried
        after a fixed delay until ``nonce_retries`` is used up, at which point
        InvalidTxNonceError is raised. Timeouts and other commit failures are
        raised immediately.
        """
        client = self._client
        if client.write_client is None:
            raise NotConfiguredError("write")

        bad_nonce_count = 0
        while True:
            try:
                return await self._commit_with_timeout(tx, timeout)
            except InvalidTxNonceError as exc:
                bad_nonce_count += 1
                client.logger.warning(
                    "Transaction rejected due to bad nonce (attempt=%d, error=%s)",
                    bad_nonce_count,
                    exc.error,
                )

            retries = client.nonce_retries
            if retries == 0 or bad_nonce_count > retries:
                break
            await asyncio.sleep(client.nonce_retry_delay)

        raise InvalidTxNonceError(
            NONCE_CONFLICT_CODE,
            NONCE_CONFLICT_ERROR,
            details={"attempts": bad_nonce_count},
        )

    async def _commit_with_timeout(self, tx: Any, timeout: float) -> BroadcastTxResult:
        attempt = asyncio.ensure_future(self._try_commit(tx))
        done, _ = await asyncio.wait({attempt}, timeout=timeout)
        if attempt in done:
            return attempt.result()

        # The attempt is left running; only its outcome is dropped.
        self._abandoned.add(attempt)
        attempt.add_done_callback(self._discard_abandoned)
        raise CommitTimeoutError(timeout)

    async def _try_commit(self, tx: Any) -> BroadcastTxResult:
        client = self._client
        write_client = client.write_client
        if write_client is None:
            raise NotConfiguredError("write")

        await client.ensure_connected()

        tx_bytes = serialize_message(tx)
        middleware = client.tx_middleware
        if middleware is not None:
            tx_bytes = await middleware.handle(tx_bytes)

        payload = to_base64(tx_bytes)
        client.logger.info("Broadcasting transaction (%d bytes)", len(tx_bytes))
        response = await write_client.send(RpcMethod.BROADCAST_TX_COMMIT.value, [payload])

        result = check_commit_result(BroadcastTxResult.from_dict(response))
        client.logger.info(
            "Transaction committed hash=%s height=%s", result.hash, result.height
        )
        return result

    def _discard_abandoned(self, task: asyncio.Future[BroadcastTxResult]) -> None:
        self._abandoned.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._client.logger.debug("Abandoned commit attempt failed: %s", exc)
        else:
            self._client.logger.debug("Abandoned commit attempt finished after timeout")
