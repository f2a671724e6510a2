import logging

from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from core.config import settings
from core.grid import OccupancyCache
from db.database import create_db_and_tables, dispose_engine
from routers.commands import router as commands_router
from contextlib import asynccontextmanager

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    # Filled from the items table on the first insert
    app.state.occupancy = OccupancyCache()
    yield
    await dispose_engine()


app = FastAPI(
    title="Storage Organizer API",
    description="API for storing and finding items in the storage grid",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    return {"status": "ok"}


# Storage command routes
app.include_router(commands_router, prefix="/commands", tags=["commands"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
