"""
Entry point for the vocab study service.

Run with:
    uvicorn vocabstudy.api.main:app --reload --port 3001
    python main.py
"""
import uvicorn

from config import get_settings

settings = get_settings()

if __name__ == "__main__":
    uvicorn.run(
        "vocabstudy.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
