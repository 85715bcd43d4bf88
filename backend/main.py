# backend/main.py
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

load_dotenv()

from config import settings
from database import init_db
from utils.error_handler import register_exception_handlers

# Router imports
from routes.auth import router as auth_router, test_router as auth_test_router
from routes.users import router as users_router
from routes.products import router as products_router
from routes.reviews import router as reviews_router
from routes.orders import router as orders_router
from routes.logs import router as logs_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialization
init_db()

app = FastAPI(title="Storefront API", version="1.0.0")

# Uploads - make sure the directory exists
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# Cookies are credentials, so origins must be explicit
origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
if settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Router registration
API_PREFIX = "/api/v1"
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)
app.include_router(products_router, prefix=API_PREFIX)
app.include_router(reviews_router, prefix=API_PREFIX)
app.include_router(orders_router, prefix=API_PREFIX)
app.include_router(logs_router, prefix=API_PREFIX)

if settings.ENABLE_TEST_ROUTES:
    logger.warning("Test routes enabled: raw verification and reset tokens are exposed")
    app.include_router(auth_test_router, prefix=API_PREFIX)


@app.get("/")
def read_root():
    return {"message": "Storefront API is running!"}
