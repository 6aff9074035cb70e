"""Application-wide constants."""

PROJECT_NAME = "Transparent Trust"
API_V1_STR = "/api/v1"
