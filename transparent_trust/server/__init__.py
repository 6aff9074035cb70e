"""FastAPI server for Transparent Trust."""
