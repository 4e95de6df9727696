#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""CredCheck - verify the permission scope of an AWS credential profile."""

from __future__ import annotations


__version__ = "0.1.0"
__author__ = "John Preston <john@ews-network.net>"
__license__ = "MPL-2.0"


__all__ = [
    "__version__",
    "__author__",
    "__license__",
]
