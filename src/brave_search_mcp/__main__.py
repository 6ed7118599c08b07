import sys

from .mcp_servers.brave_mcp_server import main

sys.exit(main())
