"""Chain client wrapper for querying the producer registry and voter accounts."""

import os
import requests
from typing import List, Dict, Any, Optional
import logging
from .types import AccountInfo, ProducerRow, TableRowsResponse
from .exceptions import RPCError
from .constants import (
    DEFAULT_RPC_URL,
    PRODUCERS_TABLE,
    PRODUCERS_TABLE_LIMIT,
    RPC_TIMEOUT,
    SYSTEM_ACCOUNT
)

# Configure logger
logger = logging.getLogger('vote4us.chain_client')


class ChainClientWrapper:
    """Wrapper around the chain HTTP API for the queries the voting flow needs."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = RPC_TIMEOUT
    ) -> None:
        """Initialize the client.

        Args:
            rpc_url: Base URL of the chain API. Falls back to the
                VOTE4US_RPC_URL environment variable, then the default node.
            session: Optional requests session to reuse connections
            timeout: Per-request timeout in seconds
        """
        self.rpc_url = (rpc_url or os.getenv('VOTE4US_RPC_URL', DEFAULT_RPC_URL)).rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        logger.info(f"Initialized ChainClientWrapper with RPC URL: {self.rpc_url}")

    def _make_rpc_call(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a JSON payload to a chain API endpoint.

        Args:
            path: Endpoint path, e.g. ``/v1/chain/get_account``
            payload: JSON body of the request

        Returns:
            The decoded JSON response

        Raises:
            RPCError: on transport failures, non-2xx responses, undecodable
                bodies or error responses from the node
        """
        url = f"{self.rpc_url}{path}"
        try:
            response = self.session.post(
                url,
                json=payload,
                headers={
                    "Content-Type": "application/json"
                },
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise RPCError(f"Request to {url} failed: {e}") from e

        if not response.ok:
            raise RPCError(
                f"Request to {url} returned HTTP {response.status_code}",
                status_code=response.status_code
            )

        try:
            result = response.json()
        except ValueError as e:
            raise RPCError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(result, dict):
            raise RPCError(f"Unexpected response type from {url}: {type(result).__name__}")
        if "error" in result:
            raise RPCError(f"RPC error: {result['error']}", status_code=result.get('code'))

        return result

    def get_table_rows(
        self,
        code: str = SYSTEM_ACCOUNT,
        scope: str = SYSTEM_ACCOUNT,
        table: str = PRODUCERS_TABLE,
        limit: int = PRODUCERS_TABLE_LIMIT,
        reverse: bool = False
    ) -> TableRowsResponse:
        """Scan a contract table.

        Args:
            code: Contract account owning the table
            scope: Table scope
            table: Table name
            limit: Maximum number of rows requested
            reverse: Whether to scan in reverse order

        Returns:
            The response with its ``rows`` list
        """
        result = self._make_rpc_call(
            "/v1/chain/get_table_rows",
            {
                "json": True,
                "code": code,
                "scope": scope,
                "table": table,
                "limit": limit,
                "reverse": reverse,
                "show_payer": False
            }
        )
        rows = result.get('rows')
        if not isinstance(rows, list):
            raise RPCError(f"get_table_rows response for {code}/{table} has no rows list")
        return result

    def get_producer_rows(self, limit: int = PRODUCERS_TABLE_LIMIT) -> List[ProducerRow]:
        """Get the raw rows of the producer registry."""
        return self.get_table_rows(limit=limit)['rows']

    def get_account(self, account_name: str) -> AccountInfo:
        """Get an account, including its voter_info when it has voted.

        Args:
            account_name: Name of the account

        Returns:
            The account information
        """
        return self._make_rpc_call("/v1/chain/get_account", {"account_name": account_name})
