import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Response, status
from fastapi.middleware.cors import CORSMiddleware

import config
from database import check_connection, init_db
from routers.invoices import router as invoices_router

config.configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Alembic owns production schemas; this keeps a local SQLite database usable.
    if os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true":
        init_db()
    yield


# App instance
app = FastAPI(title="LeaseBill", version="1.0.0", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(invoices_router)


@app.get("/health")
def health(response: Response):
    if not check_connection():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "degraded", "database": "unavailable"}
    return {"status": "ok", "database": "ok"}


if __name__ == "__main__":
    port = int(os.getenv("PORT", 10000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)
