from contextlib import asynccontextmanager
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()
from fastapi.middleware.cors import CORSMiddleware
from database import Base, engine, SessionLocal
from datetime import datetime
import os
import models  # noqa: F401  registers every table on Base.metadata
import routers.stock as stock
import routers.documents as documents
import routers.app_config as app_config
from crud import app_config as crud_app_config
import logging


LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True) # Create 'logs' directory if it doesn't exist

# Create a unique log file name based on current date/time
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

# Configure the root logger
logging.basicConfig(
    level=logging.INFO, # Set desired minimum log level (INFO, DEBUG, WARNING, ERROR, CRITICAL)
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE, # Log to a file
    filemode='a' # Append to the file if it exists
)

# Also output logs to the console
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler) # Add to the root logger

logger = logging.getLogger(__name__)
logger.info("Application starting up...")
# --- End Logging Configuration ---


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables and seed the tunables
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = crud_app_config.initialize_default_configs(db)
        if created:
            logger.info(f"Seeded default configurations: {created}")
    finally:
        db.close()
    yield


app = FastAPI(title="Razai Stock & Catalog API", version="1.0.0", lifespan=lifespan)


allowed_origins_str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:8081"
)

# Split the string into a list, stripping any whitespace
allowed_origins = [origin.strip() for origin in allowed_origins_str.split(',')]

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(stock.router)
app.include_router(documents.router)
app.include_router(app_config.router)

@app.get("/")
async def test_route():
    return {"message": "Welcome to the Razai stock & catalog API!"}
