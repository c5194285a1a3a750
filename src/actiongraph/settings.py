from __future__ import annotations
import os

REDIS_URL = os.environ.get("ACTIONGRAPH_REDIS_URL") or None
STORE_KEY = os.environ.get("ACTIONGRAPH_STORE_KEY", "actiongraph:source")

# quiet period before a submitted text is processed
DEBOUNCE_SECONDS = float(os.environ.get("ACTIONGRAPH_DEBOUNCE_SECONDS", "1.0"))
RETAIN_LAST_SUCCESS = os.environ.get("ACTIONGRAPH_RETAIN_LAST_SUCCESS", "0").lower() in ("1", "true", "yes")

# layout geometry (px)
NODE_WIDTH = float(os.environ.get("ACTIONGRAPH_NODE_WIDTH", "200"))
BASE_HEIGHT = float(os.environ.get("ACTIONGRAPH_BASE_HEIGHT", "50"))
RANK_SEP = float(os.environ.get("ACTIONGRAPH_RANK_SEP", "50"))
NODE_SEP = float(os.environ.get("ACTIONGRAPH_NODE_SEP", "50"))
ORDERING_PASSES = int(os.environ.get("ACTIONGRAPH_ORDERING_PASSES", "4"))
