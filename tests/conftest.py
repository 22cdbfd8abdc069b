import os
import tempfile

# server.main builds its store and model client from the environment at import time
os.environ.setdefault("STATE_DIR", tempfile.mkdtemp(prefix="rps_state_test_"))
for k in ("REDIS_URL", "GEMINI_API_KEY", "GOOGLE_API_KEY", "GCP_PROJECT_ID"):
    os.environ.pop(k, None)
