import os
from datetime import datetime
from pathlib import Path
from typing import Callable

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from odomo import storage
from odomo.engine import Tuning
from odomo.errors import OdomoError
from odomo.pets import PetService
from odomo.routes import router

load_dotenv(Path(__file__).parent.parent / ".env")

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def create_app(
    data_dir: Path | None = None,
    tuning: Tuning | None = None,
    clock: Callable[[], datetime] | None = None,
) -> FastAPI:
    resolved = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    storage.init_storage(resolved)

    config = storage.get_config()
    if tuning is None:
        tuning = Tuning.from_overrides(config["tuning"])

    app = FastAPI(title="Odomo")
    app.state.pets = PetService(
        tuning=tuning,
        clock=clock,
        starting_balance=config["starting_balance"],
    )
    app.include_router(router, prefix="/api")

    @app.exception_handler(OdomoError)
    async def odomo_error_handler(request: Request, exc: OdomoError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error": exc.kind},
        )

    return app


# Default app instance for uvicorn (uses DATA_DIR env var or default)
app = create_app()
