#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Alternative entry point for python -m credcheck execution.

Usage:
    python -m credcheck --profile rolesanywhere-demo

This is equivalent to:
    credcheck --profile rolesanywhere-demo
"""

import sys

from credcheck.cli import main


if __name__ == "__main__":
    sys.exit(main())
