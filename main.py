# main.py
import uvicorn

from vendorhub.config import settings
from vendorhub.main import app

if __name__ == "__main__":
    uvicorn.run(
        "vendorhub.main:app" if settings.reload else app,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
