# Copyright © Supra
# SPDX-License-Identifier: Apache-2.0

from starcoin_sdk.clients.api_client import (
    ApiClient,
    ApiClientConfig,
    ApiError,
    RpcError,
    SubmissionError,
)

__all__ = ["ApiClient", "ApiClientConfig", "ApiError", "RpcError", "SubmissionError"]
