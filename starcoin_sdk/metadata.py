# Copyright © Supra
# Parts of the project are originally copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import importlib.metadata as metadata

# constants
PACKAGE_NAME = "starcoin-sdk"


class Metadata:
    """Represents the metadata related to the SDK sent to the node in a header on every JSON-RPC call.

    It lets node operators tell SDK traffic apart from other clients.
    """

    STARCOIN_HEADER = "x-starcoin-client"

    @staticmethod
    def get_starcoin_header_val():
        try:
            version = metadata.version(PACKAGE_NAME)
        except metadata.PackageNotFoundError:
            version = "unknown"
        return f"starcoin-python-sdk/{version}"
