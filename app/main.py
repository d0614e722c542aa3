from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.attendance.router import router as attendance_router
from app.api.v1.exam_types.router import router as exam_types_router
from app.api.v1.report_cards.router import router as report_cards_router
from app.api.v1.result_deadlines.router import router as result_deadlines_router
from app.api.v1.results.router import router as results_router
from app.core.config import settings
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="School Results Backend")

    # CORS: allow the dashboard frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(result_deadlines_router)
    app.include_router(results_router)
    app.include_router(exam_types_router)
    app.include_router(attendance_router)
    app.include_router(report_cards_router)

    return app


app = create_app()
