# backend/wsgi.py
from sahl import create_app

app = create_app()
