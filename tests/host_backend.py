from dotenv import load_dotenv
import os
import sys
from pathlib import Path

import uvicorn

# Add the parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

# This line loads BOTH DATABASE_URL_PROD and DATABASE_URL_TEST into the environment
load_dotenv()

# Serve against the local test database
if not os.environ.get('DATABASE_URL_TEST'):
    raise ValueError("test db environment variable not set")
os.environ['TEST_MODE'] = 'True'
print("--- Running with LOCAL TEST DATABASE ---")

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8000))
    uvicorn.run("smart_calendar_backend.main:app", port=port, reload=True)
