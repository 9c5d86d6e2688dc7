# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

import itertools
import json
import logging
import re
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

import httpx

from starcoin_sdk.metadata import Metadata

logger = logging.getLogger(__name__)

JSON_RPC_VERSION = "2.0"


@dataclass
class ApiClientConfig:
    """Holds configuration options related to the JSON-RPC API client.

    Attributes:
        http2 (bool): Whether to use HTTP/2 for requests. Default to False.
        access_token (str | None): Optional bearer token sent with every request. Default to None.
        timeout (float): Per request timeout in seconds. Default to 60.

    """

    http2: bool = False
    access_token: str | None = None
    timeout: float = 60.0


class ApiClient:
    """A JSON-RPC 2.0 client over HTTP, shared by the namespace specific RPC clients.

    Attributes:
        _client (httpx.AsyncClient): HTTP client to send the http request.
        _request_ids (Iterator[int]): Source of JSON-RPC request ids.
        base_url (str): URL of the node's JSON-RPC endpoint.
        api_client_config (ApiClientConfig): Configuration options for API client.

    """

    _client: httpx.AsyncClient
    base_url: str
    api_client_config: ApiClientConfig

    def __init__(
        self,
        base_url: str,
        api_client_config: ApiClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initializes the API client.

        Args:
            base_url (str): URL of the node's JSON-RPC endpoint.
            api_client_config (ApiClientConfig): Configuration options for API client. Default to None.
            transport (httpx.AsyncBaseTransport | None): Custom transport, e.g. `httpx.MockTransport` in tests.
                Default to None.

        """
        api_client_config = api_client_config or ApiClientConfig()
        self.base_url = base_url
        limits = httpx.Limits()
        timeout = httpx.Timeout(api_client_config.timeout, pool=None)
        headers = {Metadata.STARCOIN_HEADER: Metadata.get_starcoin_header_val()}
        self._client = httpx.AsyncClient(
            http2=api_client_config.http2,
            limits=limits,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )
        self._request_ids = itertools.count(1)
        self.api_client_config = api_client_config

    async def close(self):
        """Closes the HTTP client session."""
        await self._client.aclose()

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        """Calls a JSON-RPC method on the node.

        Args:
            method (str): Method name, e.g. 'chain.info'.
            params (list[Any] | None): Positional parameters. Default to None.

        Returns:
            Any: The `result` member of the response, `None` when the node reports no value.

        Raises:
            ApiError: If the HTTP status is not 200 or the body is not a JSON-RPC response.
            RpcError: If the node answers with a JSON-RPC error object.

        """
        request_id = next(self._request_ids)
        payload = {
            "jsonrpc": JSON_RPC_VERSION,
            "id": request_id,
            "method": method,
            "params": params or [],
        }
        headers = {"Content-Type": "application/json"}
        if self.api_client_config.access_token:
            headers["Authorization"] = f"Bearer {self.api_client_config.access_token}"

        logger.debug("rpc request id=%d method=%s", request_id, method)
        response = await self._client.post(
            url=self.base_url, headers=headers, content=json.dumps(payload)
        )
        if response.status_code != HTTPStatus.OK:
            raise ApiError(response.text, response.status_code)

        try:
            body = response.json()
        except ValueError as err:
            raise ApiError(response.text, response.status_code) from err
        if not isinstance(body, dict):
            raise ApiError(response.text, response.status_code)

        error = body.get("error")
        if error is not None:
            logger.debug(
                "rpc error id=%d method=%s code=%s", request_id, method, error.get("code")
            )
            raise RpcError(
                method, error.get("message", ""), error.get("code"), error.get("data")
            )
        return body.get("result")


class ApiError(Exception):
    """Exception raised when the node returns a non-200 response or a body that is not JSON-RPC.

    Attributes:
        status_code (int): The HTTP status code returned.

    """

    status_code: int

    def __init__(self, message: str, status_code: int):
        """Initialize the exception with message and response status code.

        Args:
            message (str): Error message.
            status_code (int): The HTTP status code returned.

        """
        self.status_code = status_code
        super().__init__(f"{{message: {message}, status_code: {status_code}}}")


class RpcError(Exception):
    """Exception raised when the node answers a call with a JSON-RPC error object.

    Attributes:
        method (str): The JSON-RPC method that failed.
        message (str): Error message reported by the node.
        code (int | None): JSON-RPC error code.
        data (Any): Optional error details reported by the node.

    """

    method: str
    message: str
    code: int | None
    data: Any

    def __init__(self, method: str, message: str, code: int | None, data: Any = None):
        self.method = method
        self.message = message
        self.code = code
        self.data = data
        super().__init__(f"{{method: {method}, message: {message}, code: {code}}}")


_VM_STATUS = re.compile(r"\b[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)+\b")


class SubmissionError(RpcError):
    """The node rejected a submitted transaction, e.g. for a stale sequence number or bad signature.

    Attributes:
        vm_status (str | None): The status token the node reported, e.g. 'SEQUENCE_NUMBER_TOO_OLD'.

    """

    vm_status: str | None

    def __init__(self, method: str, message: str, code: int | None, data: Any = None):
        super().__init__(method, message, code, data)
        match = _VM_STATUS.search(message) or _VM_STATUS.search(json.dumps(data))
        self.vm_status = match.group(0) if match else None

    @staticmethod
    def from_rpc_error(error: RpcError) -> "SubmissionError":
        return SubmissionError(error.method, error.message, error.code, error.data)
