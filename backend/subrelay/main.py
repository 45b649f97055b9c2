from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from subrelay.core.config import settings
from subrelay.core.logging import configure_logging
from subrelay.api.router import api_router

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title=settings.APP_NAME)

if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

app.include_router(api_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
