"""
Configuration constants for the LEMS tournament backend.
All configurable settings are defined here.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Persistence
# "mongo" for a MongoDB deployment, "memory" for local development
STORE_BACKEND = os.getenv("LEMS_STORE", "mongo")
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DATABASE = os.getenv("MONGODB_DATABASE", "lems")

# Celery broker / result backend
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# HTTP
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:4200,http://localhost:3000").split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Real-time: max undelivered events buffered per websocket client
WS_QUEUE_SIZE = int(os.getenv("WS_QUEUE_SIZE", "100"))

# Judging
JUDGING_SESSION_LENGTH = 27 * 60  # seconds
JUDGING_CATEGORIES = ["innovation-project", "robot-design", "core-values"]

# Session document field holding the indicator for each judging category
CATEGORY_INDICATOR_FIELDS = {
    "core-values": "coreValues",
    "innovation-project": "innovationProject",
    "robot-design": "robotDesign",
}

# Stages of a judging session, in order (seconds)
JUDGING_SESSION_STAGES = [
    ("setup", 60),
    ("innovation-project-presentation", 5 * 60),
    ("innovation-project-questions", 5 * 60),
    ("robot-design-presentation", 5 * 60),
    ("robot-design-questions", 5 * 60),
    ("core-values-reflection", 3 * 60),
    ("core-values-questions", 3 * 60),
]

# Robot game
MATCH_LENGTH = 150  # seconds
DEFAULT_PRACTICE_ROUNDS = 1
DEFAULT_RANKING_ROUNDS = 3

# Real-time channels
CHANNELS = ["judging", "field", "pit-admin", "audience"]

# Default awards created for every new division (name, places)
DEFAULT_AWARDS = [
    ("champions", 3),
    ("core-values", 1),
    ("innovation-project", 1),
    ("robot-design", 1),
    ("robot-performance", 3),
]
