# FastAPI Application Redirect
# This file redirects to the actual app in the app package

from app.main import app

# This allows uvicorn to find the app when running from root directory
# On the device: uvicorn main:app --host 127.0.0.1 --port 8765
