import uvicorn

from convention_voting.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "convention_voting.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
