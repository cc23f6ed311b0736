# uvicorn asgi:app --port 8080
from config import Settings
from main import create_app

app = create_app(Settings.from_env())
