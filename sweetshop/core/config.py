import os

# Database Configuration
# SQLite file by default; point DATABASE_URL at postgres for real deployments
DB_URL = os.getenv("DATABASE_URL", "sqlite://db.sqlite3")

# Application Metadata
PROJECT_NAME = "Sweet Shop Catalog Service"
VERSION = "1.0.0"

# Session tokens (signed, time limited)
SECRET_KEY = os.getenv("SECRET_KEY", "dev-change-me")
TOKEN_SALT = "sweetshop-session"
TOKEN_MAX_AGE = int(os.getenv("TOKEN_MAX_AGE", 24 * 60 * 60)) # Seconds a login token stays valid

# CORS
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

# Seed script
ADMIN_SEED_PASSWORD = os.getenv("ADMIN_SEED_PASSWORD", "Admin12345")
