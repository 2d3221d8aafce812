import os

import uvicorn
from dotenv import load_dotenv

# Settings are read at import time, so .env must be loaded first
load_dotenv()

from app.main import app  # noqa: E402,F401

if __name__ == "__main__":
    # The Socket.IO wrapper, not the bare FastAPI app, is what gets served
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )
