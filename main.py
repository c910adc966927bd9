"""
Entry point for the Users Backend
"""

import sys
import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from app import create_app
from config.settings import load_settings

settings = load_settings()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = create_app(settings)

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Users Backend on port {settings.http_port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.http_port)
