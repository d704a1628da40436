import os

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv(
        "SQLALCHEMY_DATABASE_URI",
        "sqlite:///library.db"
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Initial groups for `flask seed-groups` (name, loan days, description)
    DEFAULT_BORROWER_GROUPS = [
        ("Regular", 21, "Standard borrowers with 21-day loan period"),
        ("Premium", 42, "Premium members with extended 42-day loan period"),
        ("Staff", 90, "Library staff with 90-day loan period"),
        ("Student", 14, "Students with 14-day loan period"),
    ]


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    LOG_LEVEL = "DEBUG"
