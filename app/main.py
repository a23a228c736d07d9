from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from utils.config import CORS_ORIGINS, LOG_LEVEL

# Configure logging before anything else logs
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Import routes
from routes import order_management, table_management, sessions, feedback, menu_management

# Import database and error handlers
import models  # noqa: F401  registers every model on Base.metadata
from utils.database import engine, Base
from utils.exceptions import register_exception_handlers

logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title="Restaurant QR Ordering API",
    description="Order lifecycle, table sessions and feedback for QR table ordering",
    version="1.0.0",
    openapi_tags=[
        {"name": "order_management", "description": "Orders, status changes and table grouping"},
        {"name": "sessions", "description": "Anonymous table sessions opened by QR scans"},
        {"name": "table_management", "description": "Table registry"},
        {"name": "menu_management", "description": "Menu catalogue"},
        {"name": "feedback", "description": "Anonymous customer feedback"},
    ],
)


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# Include routers
app.include_router(order_management.router)
app.include_router(sessions.router)
app.include_router(table_management.router)
app.include_router(menu_management.router)
app.include_router(feedback.router)


# Root endpoint
@app.get("/")
async def root():
    return {"success": True, "message": "Restaurant QR Ordering API"}


@app.get("/health")
async def health():
    return {"success": True, "status": "ok"}


# Main run block
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
