"""
=============================================================================
appforge - persistence & service layer of the code generation platform
=============================================================================
Hosts the shared error handlers and the database lifecycle. Business
routes are mounted by the web layer that consumes the services.
=============================================================================
"""
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from .database import close_database, init_database
from .exceptions import (
    BusinessException,
    business_exception_handler,
    global_exception_handler,
    validation_exception_handler,
)
from .logging_config import setup_logging

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_database()
    yield
    await close_database()

def create_app() -> FastAPI:
    app = FastAPI(
        title="appforge",
        description="Users, generated apps and chat histories",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(BusinessException, business_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    @app.get("/health")
    async def health():
        return {"status": "ok", "timestamp": datetime.now().isoformat()}

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("appforge.main:app", host="0.0.0.0", port=8000)
