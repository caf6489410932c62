import uvicorn

from app.core.config import settings
from app.utils.logging import setup_logging

if __name__ == "__main__":
    setup_logging("api.log", level=settings.log_level)
    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_dev,
        log_config=None,
        log_level=None,
    )
