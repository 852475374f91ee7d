# storefront/main.py
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import settings
from storefront.database import init_db

load_dotenv()
logging.basicConfig(level=settings.LOG_LEVEL)

# Routers
from storefront.routes.users import router as users_router
from storefront.routes.products import router as products_router
from storefront.routes.orders import router as orders_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Storefront Authority API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router registration
app.include_router(users_router, prefix="/api")
app.include_router(products_router, prefix="/api")
app.include_router(orders_router, prefix="/api")

@app.get("/")
def read_root():
    return {"message": "Storefront Authority API is running"}
