"""Allow running as `python -m jsonrpc_proxy`."""

import sys

from jsonrpc_proxy.cli import main

sys.exit(main())
